"""Run the wall estimator (and optionally the detector) on a local photo.

    python scripts/estimate_image.py photos/wall.jpg [zoom] [--detect]

Uses the same environment configuration as the service.
"""
import json
import sys
from pathlib import Path

from wall_quote.core.config import Settings
from wall_quote.core.credentials import materialize_credentials
from wall_quote.core.logging_config import setup_logging
from wall_quote.pricing.cost import CostCalculator
from wall_quote.vision.client import GeminiVisionClient
from wall_quote.vision.detector import ObjectDetector
from wall_quote.vision.estimator import DimensionEstimator
from wall_quote.vision.image import inspect_upload
from wall_quote.vision.results import ParsedDetection


def main():
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    if not args:
        print(__doc__)
        sys.exit(2)

    image_path = Path(args[0])
    zoom = float(args[1]) if len(args) > 1 else 1.0
    detect = "--detect" in sys.argv

    settings = Settings()
    setup_logging(settings.log_level)
    materialize_credentials(settings)

    upload = inspect_upload(image_path.read_bytes())
    client = GeminiVisionClient.from_settings(settings)

    dims = DimensionEstimator(client, settings.json_extraction).estimate(upload.data, upload.mime_type, zoom)
    cost = CostCalculator(settings.cost_rate).cost(dims.width, dims.height)
    print(f"{image_path.name} | zoom={zoom:g} | {dims.width} x {dims.height} ft | cost={cost:.2f}")

    if detect:
        outcome = ObjectDetector(client, settings.json_extraction).detect_all(upload.data, upload.mime_type)
        if isinstance(outcome, ParsedDetection):
            print(json.dumps(outcome.result, indent=2))
        else:
            print("Could not parse detection response. Raw text:")
            print(outcome.raw_text)


if __name__ == "__main__":
    main()
