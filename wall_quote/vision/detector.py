import logging

from wall_quote.core.errors import InvalidArgumentError, ParseError
from wall_quote.vision.client import VisionClient
from wall_quote.vision.parsing import GREEDY, parse_detection
from wall_quote.vision.prompts import build_detection_prompt
from wall_quote.vision.results import DetectionOutcome, ParsedDetection, UnparsedDetection

logger = logging.getLogger(__name__)

PARSE_FAILED = "Failed to parse model response"


class ObjectDetector:
    """Open-ended enumeration of everything the vision model sees in a room photo.

    The reply is kept as a plain dict; a reply that cannot be decoded is
    returned as ``UnparsedDetection`` with the raw text so it can be inspected.
    """

    def __init__(self, client: VisionClient, extraction: str = GREEDY):
        self.client = client
        self.extraction = extraction
        self.prompt = build_detection_prompt()

    def detect_all(self, image: bytes, mime_type: str) -> DetectionOutcome:
        if not image:
            raise InvalidArgumentError("No image uploaded")

        text = self.client.generate(self.prompt, image, mime_type)
        try:
            result = parse_detection(text, self.extraction)
        except ParseError as e:
            logger.error("error parsing detection response: %s", e)
            return UnparsedDetection(error=PARSE_FAILED, raw_text=text)

        return ParsedDetection(result=result, raw_text=text)
