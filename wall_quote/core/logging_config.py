import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging to stdout. Safe to call more than once."""
    logging.basicConfig(
        format=LOG_FORMAT,
        stream=sys.stdout,
        level=level.upper(),
    )
    logging.getLogger("wall_quote").setLevel(level.upper())
