from fastapi import APIRouter, Depends

from healthlens.errors import ApiError
from healthlens.routers.deps import get_completion_client
from healthlens.services.completion import CompletionClient

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/healthz")
def healthz():
    return {"ok": True}


@router.post("/validate-key")
async def validate_key(client: CompletionClient = Depends(get_completion_client)):
    if not await client.validate_key():
        raise ApiError("INVALID_KEY", "OpenAI rejected the API key", 401)
    return {"valid": True}
