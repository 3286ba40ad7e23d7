import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wall_quote.api.routes import router
from wall_quote.core.config import Settings
from wall_quote.core.credentials import materialize_credentials
from wall_quote.core.logging_config import setup_logging
from wall_quote.pricing.cost import CostCalculator
from wall_quote.vision.client import GeminiVisionClient, VisionClient
from wall_quote.vision.detector import ObjectDetector
from wall_quote.vision.estimator import DimensionEstimator
from wall_quote.vision.localizer import EndpointPredictionClient, ObjectLocalizer

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    vision_client: Optional[VisionClient] = None,
    prediction_client: Optional[EndpointPredictionClient] = None,
) -> FastAPI:
    settings = settings or Settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Wall Quote Service", version="1.0.0")

    @app.on_event("startup")
    def _startup():
        materialize_credentials(settings)

        client = vision_client or GeminiVisionClient.from_settings(settings)
        app.state.settings = settings
        app.state.estimator = DimensionEstimator(client, extraction=settings.json_extraction)
        app.state.detector = ObjectDetector(client, extraction=settings.json_extraction)
        app.state.cost_calculator = CostCalculator(rate=settings.cost_rate)

        endpoint = prediction_client
        if endpoint is None and settings.localizer_configured:
            endpoint = EndpointPredictionClient.from_settings(settings)
        if endpoint is not None:
            app.state.localizer = ObjectLocalizer(
                endpoint,
                confidence_threshold=settings.localizer_confidence_threshold,
                max_predictions=settings.localizer_max_predictions,
            )
        else:
            logger.warning("LOCALIZER_ENDPOINT_ID not set, object localization disabled")

        logger.info("wall quote service ready (model=%s, rate=%s)", settings.vision_model, settings.cost_rate)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    app.include_router(router)
    return app


app = create_app()
