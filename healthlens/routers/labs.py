from fastapi import APIRouter, Depends

from healthlens.config import Settings
from healthlens.errors import ApiError
from healthlens.routers.deps import get_completion_client, get_settings
from healthlens.schemas.requests import ParseRequest, ParseResponse
from healthlens.services.completion import CompletionClient
from healthlens.services.parser import parse_lab_text

router = APIRouter(prefix="/labs", tags=["labs"])


@router.post("/parse", response_model=ParseResponse)
async def parse(
    body: ParseRequest,
    client: CompletionClient = Depends(get_completion_client),
    settings: Settings = Depends(get_settings),
):
    if not body.text or not isinstance(body.text, str):
        raise ApiError("PARSE_FAILED", "Missing or invalid text field", 400)
    if not client.is_configured:
        raise ApiError("INVALID_KEY", "OpenAI API key not configured on server", 500)

    markers = await parse_lab_text(client, settings, body.text, body.locale)
    return ParseResponse(markers=markers)
