"""Deterministic clinical weighting of markers.

Per-marker severity, urgency, recheck interval and the immediate-attention
flag depend only on (code, value, status). Rules are applied in order and a
later matching rule overwrites the fields it sets, so the stricter threshold
for a code must come after the milder one.
"""
import dataclasses
from dataclasses import dataclass
from typing import Callable, Iterable, NamedTuple, Sequence

from healthlens.schemas.markers import EnrichedMarker, UiHints

SEVERITY_RANK = {"none": 0, "mild": 1, "moderate": 2, "significant": 3}

UI_HINTS = {
    "none": UiHints(color="#9CA3AF", icon="check-circle"),
    "mild": UiHints(color="#F59E0B", icon="alert-circle"),
    "moderate": UiHints(color="#F97316", icon="alert-triangle"),
    "significant": UiHints(color="#EF4444", icon="alert-octagon"),
}

CONFIDENCE_SCORES = {"high": 1.0, "medium": 0.7, "low": 0.4}

DEFAULT_RECHECK_DAYS = 180


@dataclass(frozen=True)
class Weighting:
    severity: str = "none"
    urgency: str = "routine"
    recommended_recheck_days: int = DEFAULT_RECHECK_DAYS
    immediate_attention: bool = False

    @property
    def ui_hints(self) -> UiHints:
        return UI_HINTS[self.severity]


class WeightingRule(NamedTuple):
    code: str
    applies: Callable[[float | None, str], bool]
    effect: dict


def _at_least(threshold: float) -> Callable[[float | None, str], bool]:
    return lambda value, status: value is not None and value >= threshold


_MODERATE_SOON = {"severity": "moderate", "urgency": "soon"}
_SIGNIFICANT_PROMPT = {"severity": "significant", "urgency": "prompt", "immediate_attention": True}

WEIGHTING_RULES: tuple[WeightingRule, ...] = (
    WeightingRule("HBA1C", _at_least(6.5), {**_MODERATE_SOON, "recommended_recheck_days": 90}),
    WeightingRule("HBA1C", _at_least(8.0), {**_SIGNIFICANT_PROMPT, "recommended_recheck_days": 30}),
    WeightingRule("LDL", _at_least(160), {**_MODERATE_SOON, "recommended_recheck_days": 90}),
    WeightingRule("LDL", _at_least(190), {**_SIGNIFICANT_PROMPT, "recommended_recheck_days": 30}),
    WeightingRule("CREAT", lambda value, status: status == "high", {**_SIGNIFICANT_PROMPT, "recommended_recheck_days": 7}),
    WeightingRule("HB", lambda value, status: status == "low", {**_MODERATE_SOON, "recommended_recheck_days": 30}),
    WeightingRule("WBC", lambda value, status: status != "normal", {**_MODERATE_SOON, "recommended_recheck_days": 30}),
)


def weigh(code: str | None, value: float | None, status: str) -> Weighting:
    weighting = Weighting()
    if status in ("high", "low"):
        weighting = dataclasses.replace(weighting, severity="mild")
    for rule in WEIGHTING_RULES:
        if rule.code == code and rule.applies(value, status):
            weighting = dataclasses.replace(weighting, **rule.effect)
    return weighting


class OverallRecommendation(NamedTuple):
    text: str
    recheck_days: int
    immediate_attention: bool


def worst_marker(markers: Iterable[EnrichedMarker]) -> EnrichedMarker | None:
    """Highest severity wins; on ties the earliest marker is kept."""
    worst = None
    for marker in markers:
        if worst is None or SEVERITY_RANK[marker.severity] > SEVERITY_RANK[worst.severity]:
            worst = marker
    return worst


def overall_recommendation(markers: Iterable[EnrichedMarker]) -> OverallRecommendation:
    worst = worst_marker(markers)
    if worst is None:
        return OverallRecommendation("Routine follow-up as needed", DEFAULT_RECHECK_DAYS, False)
    if worst.immediate_attention:
        text = "Seek medical evaluation promptly"
    else:
        text = f"Recommended recheck in approximately {worst.recommended_recheck_days} days"
    return OverallRecommendation(text, worst.recommended_recheck_days, worst.immediate_attention)


def overall_confidence(markers: Sequence[EnrichedMarker]) -> str:
    scores = [CONFIDENCE_SCORES.get(marker.confidence, CONFIDENCE_SCORES["low"]) for marker in markers]
    average = sum(scores) / max(1, len(scores))
    if average >= 0.9:
        return "high"
    if average >= 0.7:
        return "medium"
    return "low"
