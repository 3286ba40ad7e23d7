from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

REPO_ROOT = Path(__file__).resolve().parents[2]

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
AIPLATFORM_HOST = "https://{location}-aiplatform.googleapis.com"

DEFAULT_COST_RATE = 5.0  # per square foot


class Settings(BaseSettings):
    # --- Vertex AI ---
    google_project_id: Optional[str] = None
    google_location: str = "us-central1"
    google_application_credentials_json: Optional[str] = None
    credentials_path: Path = Path("/tmp/vertex-ai.json")
    vision_model: str = "gemini-2.0-flash"

    # --- AutoML object detection endpoint ---
    localizer_project_id: Optional[str] = None
    localizer_endpoint_id: Optional[str] = None
    localizer_confidence_threshold: float = Field(default=0.2, ge=0.0, le=1.0)
    localizer_max_predictions: int = Field(default=100, gt=0)

    # --- Remote calls ---
    remote_timeout_seconds: float = Field(default=60.0, gt=0)
    remote_retry_attempts: int = Field(default=3, ge=1)
    remote_retry_base_seconds: float = Field(default=0.5, ge=0)

    # --- Pricing / parsing ---
    cost_rate: float = DEFAULT_COST_RATE
    json_extraction: Literal["greedy", "balanced"] = "greedy"

    # --- Uploads / misc ---
    max_image_mb: int = Field(default=20, gt=0)
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=REPO_ROOT / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def max_image_bytes(self) -> int:
        return self.max_image_mb * 1024 * 1024

    @property
    def localizer_project(self) -> Optional[str]:
        return self.localizer_project_id or self.google_project_id

    @property
    def localizer_configured(self) -> bool:
        return bool(self.localizer_project and self.localizer_endpoint_id)

    def predict_url(self) -> str:
        host = AIPLATFORM_HOST.format(location=self.google_location)
        return (
            f"{host}/v1/projects/{self.localizer_project}"
            f"/locations/{self.google_location}"
            f"/endpoints/{self.localizer_endpoint_id}:predict"
        )
