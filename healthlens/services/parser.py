import logging
import re
from typing import Any

from healthlens.config import Settings
from healthlens.errors import ApiError
from healthlens.schemas.markers import RawMarker, ValidatedMarker
from healthlens.services import fallback_parser
from healthlens.services.completion import CompletionClient, CompletionError
from healthlens.services.validator import coerce_raw_marker, validate_markers

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """
You are a medical lab result extraction engine.
STRICT RULES:
- Extract ONLY real lab markers that actually appear.
- NEVER guess or hallucinate values.
- Ignore narratives, diagnosis, discussion, ECG, echo, ultrasound text.
- Prefer numerical result column, NOT reference or date.
- Use ONLY values explicitly present in lab report.
- If unsure -> do not include marker.
- Return ONLY JSON.

Output structure:
{
 "markers": [
  {
    "name": "Human readable name",
    "code": "STANDARD_CODE",
    "value": number,
    "unit": "exact unit text",
    "refRange": "raw visible ref text or null"
  }
 ]
}

Allowed markers ONLY:
HbA1c, Glucose fasting, Glucose PP, Cholesterol, LDL, HDL, Triglycerides, Creatinine, Urea, TSH, CBC - Hb, RBC, Platelets, WBC.
"""

_DECIMAL_COMMA = re.compile(r"(\d),(\d)")


def normalize_locale_decimals(text: str, locale: Any = None) -> str:
    if isinstance(locale, str) and locale.lower().startswith("de"):
        return _DECIMAL_COMMA.sub(r"\1.\2", text)
    return text


def markers_from_payload(payload: dict) -> list[RawMarker]:
    items = payload.get("markers")
    if not isinstance(items, list):
        return []
    candidates = (coerce_raw_marker(item) for item in items)
    return [candidate for candidate in candidates if candidate is not None]


async def extract_markers_with_ai(client: CompletionClient, text: str, temperature: float = 0.0) -> list[RawMarker]:
    payload = await client.complete_json(EXTRACTION_PROMPT, text, temperature=temperature)
    return markers_from_payload(payload)


async def parse_lab_text(
    client: CompletionClient,
    settings: Settings,
    text: str,
    locale: Any = None,
) -> list[ValidatedMarker]:
    """Extract validated markers from report text.

    AI extraction runs first. When it fails or nothing it returns survives
    validation, the regex fallback parser (if enabled) runs on the same text.
    """
    clean_text = normalize_locale_decimals(text, locale)

    markers: list[ValidatedMarker] = []
    try:
        candidates = await extract_markers_with_ai(client, clean_text, temperature=settings.extraction_temperature)
        markers = validate_markers(candidates)
        if not markers:
            logger.warning("AI extraction returned no valid markers")
    except CompletionError as exc:
        logger.warning("AI extraction failed: %s", exc.code)

    if not markers and settings.labs_enable_regex_fallback:
        markers = validate_markers(fallback_parser.parse_text(clean_text))
        logger.info("Regex fallback produced %d markers", len(markers))

    if not markers:
        raise ApiError("PARSE_FAILED", "Unable to extract lab values", 422)
    return markers
