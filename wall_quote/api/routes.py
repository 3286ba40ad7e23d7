import asyncio
import logging
import math

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from wall_quote.core.errors import InvalidArgumentError, ParseError
from wall_quote.schemas.response import (
    ErrorResponse,
    HealthResponse,
    LocalizationResponse,
    WallEstimateResponse,
)
from wall_quote.vision.image import ImageUpload, inspect_upload
from wall_quote.vision.results import UnparsedDetection

logger = logging.getLogger(__name__)

router = APIRouter()

NO_IMAGE = "No image uploaded"
INVALID_ZOOM = "Invalid zoom value"


def _state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(status_code=500, detail="Service not initialized.")
    return value


async def read_image(request: Request) -> ImageUpload:
    settings = _state(request, "settings")
    form = await request.form()
    image = form.get("image")
    if image is None or isinstance(image, str):
        raise HTTPException(status_code=400, detail=NO_IMAGE)

    data = await image.read()
    if not data:
        raise HTTPException(status_code=400, detail=NO_IMAGE)
    if len(data) > settings.max_image_bytes:
        raise HTTPException(status_code=413, detail=f"File too large (max {settings.max_image_mb}MB).")

    try:
        return inspect_upload(data, image.content_type)
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e))


def parse_zoom(raw) -> float:
    if raw is None or raw == "":
        return 1.0
    if not isinstance(raw, str):
        raise HTTPException(status_code=400, detail=INVALID_ZOOM)
    try:
        zoom = float(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail=INVALID_ZOOM)
    if not math.isfinite(zoom) or zoom <= 0:
        raise HTTPException(status_code=400, detail=INVALID_ZOOM)
    return zoom


def _failure(e: Exception, fallback: str) -> HTTPException:
    if isinstance(e, InvalidArgumentError):
        return HTTPException(status_code=400, detail=str(e) or fallback)
    return HTTPException(status_code=500, detail=str(e) or fallback)


@router.get("/health", response_model=HealthResponse)
def health(request: Request):
    settings = _state(request, "settings")
    _state(request, "estimator")

    return HealthResponse(
        status="ok",
        vision_model=settings.vision_model,
        location=settings.google_location,
        cost_rate=settings.cost_rate,
        extraction=settings.json_extraction,
        localizer_configured=getattr(request.app.state, "localizer", None) is not None,
    )


@router.post(
    "/api/analyze-wall",
    response_model=WallEstimateResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def analyze_wall(request: Request):
    estimator = _state(request, "estimator")
    calculator = _state(request, "cost_calculator")

    upload = await read_image(request)
    form = await request.form()
    zoom = parse_zoom(form.get("zoom"))

    try:
        dims = await asyncio.to_thread(estimator.estimate, upload.data, upload.mime_type, zoom)
        cost = calculator.cost(dims.width, dims.height)
        if not math.isfinite(cost):
            raise ParseError(f"Estimated cost is out of range for {dims.width}x{dims.height} ft")
    except Exception as e:
        logger.error("wall analysis failed: %s", e)
        raise _failure(e, "Failed to analyze image")

    return WallEstimateResponse(width=dims.width, height=dims.height, cost=cost, zoom=zoom)


@router.post(
    "/api/object-detection",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def object_detection(request: Request):
    detector = _state(request, "detector")
    upload = await read_image(request)

    try:
        outcome = await asyncio.to_thread(detector.detect_all, upload.data, upload.mime_type)
    except Exception as e:
        logger.error("object detection error: %s", e)
        raise _failure(e, "Failed to process image")

    if isinstance(outcome, UnparsedDetection):
        return JSONResponse(
            status_code=500,
            content={"error": outcome.error, "raw_response": outcome.raw_text},
        )
    return JSONResponse(content=outcome.result)


@router.post(
    "/api/object-localization",
    response_model=LocalizationResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def object_localization(request: Request):
    upload = await read_image(request)
    localizer = getattr(request.app.state, "localizer", None)
    if localizer is None:
        raise HTTPException(status_code=500, detail="Object localization endpoint is not configured.")

    try:
        predictions = await asyncio.to_thread(localizer.localize, upload.data)
    except Exception as e:
        logger.error("error calling prediction endpoint: %s", e)
        raise _failure(e, "Unknown error")

    return LocalizationResponse(success=True, predictions=predictions)
