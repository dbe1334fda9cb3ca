import logging
import math
import re
from typing import Any, Iterable

from healthlens.schemas.markers import RawMarker, ValidatedMarker
from healthlens.services.normalizer import normalize_code

logger = logging.getLogger(__name__)

# Inclusive [min, max] of values a lab could plausibly report for each code.
PLAUSIBILITY_RANGES: dict[str, tuple[float, float]] = {
    "HBA1C": (3, 20),
    "GLU": (40, 600),
    "CHOL": (80, 400),
    "LDL": (20, 250),
    "HDL": (20, 120),
    "TG": (40, 800),
    "CREAT": (0.2, 10),
    "TSH": (0.01, 100),
    "HB": (4, 20),
    "WBC": (2000, 30000),
    "PLT": (20000, 800000),
}

YEAR_WINDOW = (1900, 2100)

# Plain decimal or exponent notation only; float() would also take "1_000", "nan" or "inf".
_NUMERIC = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def to_number(value: Any) -> float | None:
    """Coerce an untrusted value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not _NUMERIC.fullmatch(text):
            return None
        number = float(text)
    else:
        return None
    return number if math.isfinite(number) else None


def is_plausible(code: str, value: float | None) -> bool:
    if value is None or not math.isfinite(value):
        return False
    # Years and similar artifacts misread as results.
    if YEAR_WINDOW[0] < value < YEAR_WINDOW[1]:
        return False
    bounds = PLAUSIBILITY_RANGES.get(code)
    if bounds and (value < bounds[0] or value > bounds[1]):
        return False
    return True


def validate_marker(raw: RawMarker) -> ValidatedMarker | None:
    code = normalize_code(raw.name)
    if code is None:
        return None
    value = to_number(raw.value)
    if not is_plausible(code, value):
        return None
    return ValidatedMarker(
        name=raw.name,
        code=code,
        value=value,
        unit=raw.unit or "",
        ref_range=raw.ref_range or None,
    )


def coerce_raw_marker(item: Any) -> RawMarker | None:
    """Build a RawMarker from one untyped JSON entry, checking every field's presence and type."""
    if not isinstance(item, dict):
        return None
    name = item.get("name")
    unit = item.get("unit")
    ref_range = item.get("refRange")
    return RawMarker(
        name=name if isinstance(name, str) else "",
        value=item.get("value"),
        unit=unit if isinstance(unit, str) else "",
        ref_range=ref_range if isinstance(ref_range, str) else None,
    )


def validate_markers(candidates: Iterable[RawMarker]) -> list[ValidatedMarker]:
    validated = []
    dropped = 0
    for raw in candidates:
        marker = validate_marker(raw)
        if marker is None:
            dropped += 1
            continue
        validated.append(marker)
    if dropped:
        logger.info("Dropped %d marker candidates that failed validation", dropped)
    return validated
