from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from healthlens.errors import ApiError
from healthlens.main import app, limiter
from healthlens.routers.deps import get_completion_client


class FakeCompletionClient:
    """Stands in for the completion API; replies are consumed in order."""

    def __init__(self, replies=None, configured: bool = True):
        self.replies = list(replies or [])
        self.configured = configured
        self.calls: list[dict] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def complete_json(self, system_prompt, user_prompt, temperature=0.0, max_tokens=None):
        self.calls.append({"system": system_prompt, "user": user_prompt, "temperature": temperature})
        reply = self.replies.pop(0)
        if isinstance(reply, ApiError):
            raise reply
        return reply

    async def validate_key(self) -> bool:
        return self.configured


@pytest.fixture()
def fake_completion() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture()
def client(fake_completion) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_completion_client] = lambda: fake_completion

    # Rate limiting is switched on only by the tests that exercise it.
    limiter.enabled = False
    limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    limiter.enabled = True
    limiter.reset()
    app.dependency_overrides.clear()
