import re
from typing import Any, NamedTuple

_NUMBER = r"(\d+(?:\.\d+)?)"

_RANGE_PAT = re.compile(rf"^{_NUMBER}[-–]{_NUMBER}$", re.ASCII)
_UPPER_PAT = re.compile(rf"^<{_NUMBER}$", re.ASCII)
_LOWER_PAT = re.compile(rf"^>{_NUMBER}$", re.ASCII)
_TO_PAT = re.compile(rf"^{_NUMBER}to{_NUMBER}$", re.ASCII | re.IGNORECASE)


class Bounds(NamedTuple):
    low: float | None
    high: float | None

    @property
    def parsed(self) -> bool:
        return self.low is not None or self.high is not None


UNPARSED = Bounds(None, None)


def parse_ref_range(ref: Any) -> Bounds:
    """Parse reference range text such as ``4.0-6.0``, ``<5``, ``>40`` or ``10 to 20``.

    Never raises; anything unrecognised yields ``Bounds(None, None)``.
    """
    if not isinstance(ref, str):
        return UNPARSED
    text = re.sub(r"\s", "", ref)

    match = _RANGE_PAT.match(text)
    if match:
        return Bounds(float(match.group(1)), float(match.group(2)))
    match = _UPPER_PAT.match(text)
    if match:
        return Bounds(None, float(match.group(1)))
    match = _LOWER_PAT.match(text)
    if match:
        return Bounds(float(match.group(1)), None)
    match = _TO_PAT.match(text)
    if match:
        return Bounds(float(match.group(1)), float(match.group(2)))
    return UNPARSED
