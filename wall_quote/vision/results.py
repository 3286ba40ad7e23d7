from dataclasses import dataclass
from typing import Any, Dict, Union


@dataclass
class WallDimensions:
    width: float
    height: float


@dataclass
class ParsedDetection:
    result: Dict[str, Any]
    raw_text: str


@dataclass
class UnparsedDetection:
    error: str
    raw_text: str


DetectionOutcome = Union[ParsedDetection, UnparsedDetection]
