from typing import Any, List, Optional
from pydantic import BaseModel, Field

class WallEstimateResponse(BaseModel):
    width: float
    height: float
    cost: float
    zoom: float = Field(gt=0)

class LocalizationResponse(BaseModel):
    success: bool = True
    predictions: List[Any]

class ErrorResponse(BaseModel):
    error: str
    raw_response: Optional[str] = None

class HealthResponse(BaseModel):
    status: str
    vision_model: str
    location: str
    cost_rate: float
    extraction: str
    localizer_configured: bool
