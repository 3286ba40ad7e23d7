import logging
import math

from wall_quote.core.errors import InvalidArgumentError
from wall_quote.vision.client import VisionClient
from wall_quote.vision.parsing import GREEDY, parse_dimensions
from wall_quote.vision.prompts import build_dimension_prompt
from wall_quote.vision.results import WallDimensions

logger = logging.getLogger(__name__)


class DimensionEstimator:
    """Asks the vision model for the real-world size of a photographed wall."""

    def __init__(self, client: VisionClient, extraction: str = GREEDY):
        self.client = client
        self.extraction = extraction

    def estimate(self, image: bytes, mime_type: str, zoom: float = 1.0) -> WallDimensions:
        if not image:
            raise InvalidArgumentError("No image uploaded")
        if not math.isfinite(zoom) or zoom <= 0:
            raise InvalidArgumentError("Invalid zoom value")

        prompt = build_dimension_prompt(zoom)
        text = self.client.generate(prompt, image, mime_type)
        dims = parse_dimensions(text, self.extraction)

        # Magnitudes are passed through as the model reported them.
        if dims.width <= 0 or dims.height <= 0:
            logger.warning("model returned non-positive dimensions: %s", dims)

        logger.info("estimated wall %sx%s ft at zoom %s", dims.width, dims.height, zoom)
        return dims
