from typing import Any, NamedTuple

from healthlens.services.ref_range import parse_ref_range
from healthlens.services.validator import to_number


class MarkerStatus(NamedTuple):
    status: str  # normal | high | low | unknown
    confidence: str  # high | medium | low


def compute_status(value: Any, ref_range: Any) -> MarkerStatus:
    if value is None or ref_range is None:
        return MarkerStatus("unknown", "low")

    bounds = parse_ref_range(str(ref_range))
    if not bounds.parsed:
        # A range was supplied but could not be read.
        return MarkerStatus("unknown", "medium")

    number = to_number(value)
    if number is None:
        return MarkerStatus("unknown", "low")

    if bounds.high is not None and number > bounds.high:
        return MarkerStatus("high", "high")
    if bounds.low is not None and number < bounds.low:
        return MarkerStatus("low", "high")
    return MarkerStatus("normal", "high")
