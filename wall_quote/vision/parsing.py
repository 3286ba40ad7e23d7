"""Pull a JSON answer out of free-form model text."""
import json
import logging
import math
import re
from numbers import Real
from typing import Any, Optional

from wall_quote.core.errors import ParseError
from wall_quote.vision.results import WallDimensions

logger = logging.getLogger(__name__)

GREEDY = "greedy"
BALANCED = "balanced"

_GREEDY_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def _reject_constant(name: str):
    # NaN / Infinity / -Infinity are not JSON
    raise ValueError(f"non-standard JSON constant: {name}")


def _finite_float(literal: str) -> float:
    value = float(literal)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {literal}")
    return value


_decoder = json.JSONDecoder(parse_float=_finite_float, parse_constant=_reject_constant)


def extract_json_block(text: str, strategy: str = GREEDY) -> Optional[Any]:
    """Return the decoded JSON object found in ``text``, or ``None``.

    Raises ``ValueError`` when the greedy span exists but is not valid JSON.
    """
    if strategy == GREEDY:
        match = _GREEDY_OBJECT.search(text)
        if not match:
            return None
        return _decoder.decode(match.group(0))

    if strategy == BALANCED:
        start = text.find("{")
        while start != -1:
            try:
                obj, _ = _decoder.raw_decode(text, start)
                return obj
            except ValueError:
                start = text.find("{", start + 1)
        return None

    raise ValueError(f"unknown extraction strategy: {strategy!r}")


def _as_length(value: Any) -> Optional[float]:
    if not isinstance(value, Real) or isinstance(value, bool):
        return None
    try:
        length = float(value)
    except OverflowError:
        return None
    return length if math.isfinite(length) else None


def parse_dimensions(text: str, strategy: str = GREEDY) -> WallDimensions:
    """Read ``{"width": <number>, "height": <number>}`` from model text."""
    try:
        dims = extract_json_block(text, strategy)
    except ValueError as e:
        logger.error("dimension reply is not valid JSON: %s", e)
        dims = None

    if isinstance(dims, dict):
        width = _as_length(dims.get("width"))
        height = _as_length(dims.get("height"))
        if width is not None and height is not None:
            return WallDimensions(width=width, height=height)

    logger.error("could not parse dimensions from model response: %r", text)
    raise ParseError("Vision model did not return valid dimensions: " + text, raw_text=text)


def parse_detection(text: str, strategy: str = GREEDY) -> dict:
    """Read any JSON object from model text; field contents are not checked."""
    try:
        result = extract_json_block(text, strategy)
    except ValueError as e:
        raise ParseError(f"Could not parse JSON from model response: {e}", raw_text=text) from e

    if not isinstance(result, dict):
        raise ParseError("Could not parse JSON from model response", raw_text=text)
    return result
