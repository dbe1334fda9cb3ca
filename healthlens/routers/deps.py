from functools import lru_cache

from healthlens.config import Settings, settings
from healthlens.services.completion import CompletionClient


def get_settings() -> Settings:
    return settings


@lru_cache
def get_completion_client() -> CompletionClient:
    return CompletionClient(settings)
