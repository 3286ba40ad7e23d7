import base64
import logging
from typing import Any, Callable, Dict, List, Optional

import requests

from wall_quote.core.config import Settings
from wall_quote.core.credentials import fetch_access_token
from wall_quote.core.errors import InvalidArgumentError, UpstreamError
from wall_quote.core.retry import NO_RETRY, RetryPolicy, retry_on

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], str]


def is_transient(exc: Exception) -> bool:
    return isinstance(exc, (requests.ConnectionError, requests.Timeout))


class EndpointPredictionClient:
    """REST client for a deployed Vertex AI prediction endpoint.

    A bearer token is fetched for every request; nothing is cached.
    """

    def __init__(
        self,
        predict_url: str,
        token_provider: TokenProvider = fetch_access_token,
        timeout: float = 60.0,
        retry: RetryPolicy = NO_RETRY,
        session: Optional[requests.Session] = None,
    ):
        self.predict_url = predict_url
        self.token_provider = token_provider
        self.timeout = timeout
        self.retry = retry
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "EndpointPredictionClient":
        return cls(
            predict_url=settings.predict_url(),
            timeout=settings.remote_timeout_seconds,
            retry=RetryPolicy(
                attempts=settings.remote_retry_attempts,
                base=settings.remote_retry_base_seconds,
            ),
        )

    def predict(self, instances: List[Dict[str, Any]], parameters: Dict[str, Any]) -> Dict[str, Any]:
        token = self.token_provider()
        if not token:
            raise UpstreamError("Failed to obtain access token")

        def _call():
            return self.session.post(
                self.predict_url,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                },
                json={"instances": instances, "parameters": parameters},
                timeout=self.timeout,
            )

        try:
            resp = retry_on(_call, self.retry, is_retryable=is_transient)
        except requests.RequestException as e:
            raise UpstreamError(f"Prediction endpoint request failed: {e}") from e

        if not resp.ok:
            logger.error("prediction endpoint returned %s: %s", resp.status_code, resp.text)
            raise UpstreamError(resp.text or f"HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as e:
            raise UpstreamError(f"Prediction endpoint returned invalid JSON: {e}") from e
        if not isinstance(body, dict):
            raise UpstreamError("Prediction endpoint returned an unexpected body")
        return body


class ObjectLocalizer:
    """Bounding-box predictions from a dedicated object-detection endpoint, passed through as-is."""

    def __init__(
        self,
        client: EndpointPredictionClient,
        confidence_threshold: float = 0.2,
        max_predictions: int = 100,
    ):
        self.client = client
        self.confidence_threshold = confidence_threshold
        self.max_predictions = max_predictions

    def localize(self, image: bytes) -> list:
        if not image:
            raise InvalidArgumentError("No image uploaded")

        content = base64.b64encode(image).decode("ascii")
        body = self.client.predict(
            instances=[{"content": content}],
            parameters={
                "confidenceThreshold": self.confidence_threshold,
                "maxPredictions": self.max_predictions,
            },
        )
        predictions = body.get("predictions") or []
        logger.info("endpoint returned %d prediction(s)", len(predictions))
        return predictions
