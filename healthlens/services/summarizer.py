import json
import logging

from healthlens.config import Settings
from healthlens.errors import ApiError
from healthlens.schemas.markers import EnrichedMarker, SummaryMarker
from healthlens.services.completion import CompletionClient
from healthlens.services.enrichment import enrich_markers
from healthlens.services.safety import is_safe
from healthlens.services.weighting import overall_confidence, overall_recommendation

logger = logging.getLogger(__name__)

DISCLAIMER = (
    "This summary is for educational purposes only and is not a medical diagnosis "
    "or treatment recommendation."
)
LEGAL_NOTICE = (
    "Interpretation depends on laboratory reference ranges and clinical evaluation.\n"
    "Do not use for emergency or treatment decisions. Consult a qualified healthcare professional for advice.\n"
    "HealthLens processes data securely and does not permanently store personal medical data."
)

SUMMARY_SYSTEM_PROMPT = """
You are HealthLens AI - generate a friendly, medically cautious explanation.

STRICT RULES:
- Use ONLY the provided markers (values/status/severity/urgency/confidence).
- DO NOT diagnose or prescribe.
- Use cautious language (e.g., "may suggest", "is often associated with").
- Output JSON only and EXACTLY in the schema requested.
"""

SUMMARY_SCHEMA = """{
  "overallSummary": "",
  "keyObservations": [],
  "markerExplanations": [
    { "name":"", "whatItMeasures":"", "whatItSuggests":"", "whyItMatters":"" }
  ],
  "wellnessConsiderations": [],
  "whenToSeekAdvice": [],
  "disclaimer": "",
  "legalNotice": ""
}"""


def build_summary_prompt(
    enriched: list[EnrichedMarker],
    recommendation: str,
    confidence: str,
    language: str,
) -> str:
    markers_json = json.dumps([marker.model_dump(by_alias=True) for marker in enriched], ensure_ascii=False)
    return (
        f"Language: {language}\n"
        f"Markers (enriched): {markers_json}\n"
        f"OverallRecommendation: {recommendation}\n"
        f"OverallConfidence: {confidence}\n"
        f"Disclaimer: {DISCLAIMER}\n"
        f"LegalNotice: {LEGAL_NOTICE}\n\n"
        f"Return EXACT JSON schema:\n{SUMMARY_SCHEMA}\n"
    )


async def generate_summary(
    client: CompletionClient,
    settings: Settings,
    markers: list[SummaryMarker],
    language: str = "en",
) -> dict:
    enriched = enrich_markers(markers)
    recommendation = overall_recommendation(enriched)
    confidence = overall_confidence(enriched)

    parsed = await client.complete_json(
        SUMMARY_SYSTEM_PROMPT,
        build_summary_prompt(enriched, recommendation.text, confidence, language),
        temperature=settings.summary_temperature,
        max_tokens=settings.summary_max_tokens,
    )
    if not is_safe(parsed):
        raise ApiError("UNSAFE_RESPONSE", "Unsafe content detected", 502)

    # Deterministic fields always overwrite whatever the AI returned under the same keys.
    parsed["enrichedMarkers"] = [marker.model_dump(by_alias=True) for marker in enriched]
    parsed["overallRecommendation"] = recommendation.text
    parsed["overallRecheckDays"] = recommendation.recheck_days
    parsed["immediateAttention"] = recommendation.immediate_attention
    parsed["overallConfidence"] = confidence
    parsed["disclaimer"] = DISCLAIMER
    parsed["legalNotice"] = LEGAL_NOTICE
    parsed["extractionDebug"] = [{"code": m.code, "sourceSnippet": m.source_snippet} for m in enriched]
    return parsed
