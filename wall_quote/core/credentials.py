"""Credential bootstrap run once at startup, and per-call ADC access tokens."""
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional, Sequence

import google.auth
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as GoogleAuthRequest

from wall_quote.core.config import CLOUD_PLATFORM_SCOPE, Settings
from wall_quote.core.errors import InvalidArgumentError, UpstreamError

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_materialized: Optional[Path] = None


def materialize_credentials(settings: Settings) -> Optional[Path]:
    """Write the credential JSON from settings to ``settings.credentials_path``.

    Returns the path written, or ``None`` when no JSON is configured (the
    ambient ADC chain is then used as is). Repeated calls are no-ops.
    """
    global _materialized

    content = settings.google_application_credentials_json
    if not content:
        logger.info("no inline credentials configured, relying on ambient ADC")
        return None

    with _lock:
        if _materialized is not None:
            return _materialized

        try:
            json.loads(content)
        except ValueError as e:
            raise InvalidArgumentError(f"GOOGLE_APPLICATION_CREDENTIALS_JSON is not valid JSON: {e}")

        path = Path(settings.credentials_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".credentials-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
            os.chmod(tmp, 0o600)
            os.replace(tmp, path)
        except OSError:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

        os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = str(path)
        _materialized = path
        logger.info("credentials written to %s", path)
        return path


def _reset_materialized() -> None:
    global _materialized
    with _lock:
        _materialized = None


def fetch_access_token(scopes: Sequence[str] = (CLOUD_PLATFORM_SCOPE,)) -> str:
    """Return a fresh OAuth2 access token from Application Default Credentials."""
    try:
        credentials, _ = google.auth.default(scopes=list(scopes))
        credentials.refresh(GoogleAuthRequest())
    except GoogleAuthError as e:
        raise UpstreamError(f"Failed to obtain access token: {e}") from e

    if not credentials.token:
        raise UpstreamError("Failed to obtain access token")
    return credentials.token
