import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

BANNED_PHRASES = ("prescribe", "start taking", "take medication", "diagnose", "treatment plan")


def find_banned_phrase(candidate: Any) -> str | None:
    """Return the first banned phrase found in the serialized AI output, if any."""
    text = candidate if isinstance(candidate, str) else json.dumps(candidate, ensure_ascii=False)
    lowered = text.lower()
    for phrase in BANNED_PHRASES:
        if phrase in lowered:
            return phrase
    return None


def is_safe(candidate: Any) -> bool:
    phrase = find_banned_phrase(candidate)
    if phrase is not None:
        logger.warning("AI summary rejected by safety filter (matched %r)", phrase)
        return False
    return True
