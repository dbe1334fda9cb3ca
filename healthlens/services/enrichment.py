from typing import Iterable

from healthlens.schemas.markers import EnrichedMarker, SummaryMarker
from healthlens.services.normalizer import resolve_code
from healthlens.services.status import compute_status
from healthlens.services.validator import to_number
from healthlens.services.weighting import weigh


def enrich_marker(marker: SummaryMarker) -> EnrichedMarker:
    code = resolve_code(marker.code, marker.name)
    value = to_number(marker.value)
    status = compute_status(marker.value, marker.ref_range)
    weighting = weigh(code, value, status.status)
    return EnrichedMarker(
        name=marker.name,
        code=code,
        value=value,
        unit=marker.unit,
        ref_range=marker.ref_range,
        flag=marker.flag,
        observed_at=marker.observed_at,
        source_snippet=marker.source_snippet,
        status=status.status,
        confidence=status.confidence,
        severity=weighting.severity,
        urgency=weighting.urgency,
        recommended_recheck_days=weighting.recommended_recheck_days,
        immediate_attention=weighting.immediate_attention,
        ui_hints=weighting.ui_hints,
    )


def enrich_markers(markers: Iterable[SummaryMarker]) -> list[EnrichedMarker]:
    return [enrich_marker(marker) for marker in markers]
