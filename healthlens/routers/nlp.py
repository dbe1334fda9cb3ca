from fastapi import APIRouter, Depends

from healthlens.config import Settings
from healthlens.errors import ApiError
from healthlens.routers.deps import get_completion_client, get_settings
from healthlens.schemas.markers import SummaryMarker
from healthlens.schemas.requests import SummaryRequest
from healthlens.services.completion import CompletionClient
from healthlens.services.summarizer import generate_summary

router = APIRouter(prefix="/nlp", tags=["nlp"])


@router.post("/summary")
async def summary(
    body: SummaryRequest,
    client: CompletionClient = Depends(get_completion_client),
    settings: Settings = Depends(get_settings),
):
    if not client.is_configured:
        raise ApiError("INVALID_KEY", "OpenAI API key not configured on server", 500)
    if not isinstance(body.markers, list) or not body.markers:
        raise ApiError("AI_FAILED", "Missing markers", 400)

    markers = [SummaryMarker.from_untrusted(item) for item in body.markers]
    language = body.language if isinstance(body.language, str) and body.language else "en"
    return await generate_summary(client, settings, markers, language=language)
