import json
import logging

import openai
from llama_index.core.llms import ChatMessage, MessageRole
from llama_index.llms.openai import OpenAI

from healthlens.config import Settings
from healthlens.errors import ApiError

logger = logging.getLogger(__name__)


class CompletionError(ApiError):
    """Failure of a call to the completion API. Never retried within a request."""


def map_provider_error(exc: Exception) -> CompletionError:
    if isinstance(exc, openai.AuthenticationError):
        return CompletionError("INVALID_KEY", "OpenAI rejected the API key", 401)
    if isinstance(exc, openai.RateLimitError) and getattr(exc, "code", None) == "insufficient_quota":
        return CompletionError("AI_QUOTA_EXCEEDED", "OpenAI quota exceeded.", 402)
    if isinstance(exc, openai.APIStatusError):
        return CompletionError("AI_PROVIDER_ERROR", exc.message or "AI error", 502)
    if isinstance(exc, openai.APIConnectionError):
        return CompletionError("AI_PROVIDER_ERROR", "AI provider unreachable or timed out", 502)
    return CompletionError("AI_FAILED", "Completion request failed", 500)


class CompletionClient:
    """JSON-mode chat completions through llama_index's OpenAI LLM."""

    def __init__(self, settings: Settings):
        self.api_key = settings.openai_api_key
        self.model = settings.openai_model
        self.timeout = settings.openai_timeout_seconds

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _llm(self, temperature: float, max_tokens: int | None) -> OpenAI:
        return OpenAI(
            model=self.model,
            api_key=self.api_key,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=self.timeout,
            max_retries=0,
            additional_kwargs={"response_format": {"type": "json_object"}},
        )

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
        max_tokens: int | None = None,
    ) -> str:
        if not self.is_configured:
            raise CompletionError("INVALID_KEY", "OpenAI API key not configured on server", 500)

        messages = [
            ChatMessage(role=MessageRole.SYSTEM, content=system_prompt),
            ChatMessage(role=MessageRole.USER, content=user_prompt),
        ]
        try:
            response = await self._llm(temperature, max_tokens).achat(messages)
        except openai.OpenAIError as exc:
            error = map_provider_error(exc)
            logger.warning("Completion call failed: %s (%s)", error.code, type(exc).__name__)
            raise error from exc
        except Exception as exc:
            logger.exception("Unexpected completion client failure")
            raise map_provider_error(exc) from exc

        content = response.message.content if response.message else None
        if not content:
            raise CompletionError("AI_FAILED", "Empty AI response", 502)
        return content

    async def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
        max_tokens: int | None = None,
    ) -> dict:
        content = await self.complete(system_prompt, user_prompt, temperature=temperature, max_tokens=max_tokens)
        try:
            payload = json.loads(content)
        except json.JSONDecodeError as exc:
            logger.warning("AI returned non-JSON content (%d chars)", len(content))
            raise CompletionError("AI_FAILED", "Invalid AI JSON", 502) from exc
        if not isinstance(payload, dict):
            raise CompletionError("AI_FAILED", "Invalid AI JSON", 502)
        return payload

    async def validate_key(self) -> bool:
        if not self.is_configured:
            raise CompletionError("INVALID_KEY", "OpenAI API key not configured on server", 500)
        client = openai.AsyncOpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        try:
            await client.models.list()
        except openai.AuthenticationError:
            return False
        except openai.OpenAIError as exc:
            logger.warning("validate-key call failed: %s", type(exc).__name__)
            raise CompletionError("INVALID_KEY", "OpenAI validation failed", 401) from exc
        finally:
            await client.close()
        return True
