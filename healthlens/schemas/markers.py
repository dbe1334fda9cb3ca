from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RawMarker(CamelModel):
    """Marker candidate as produced by AI extraction or the fallback parser. Never trusted."""
    name: str = ""
    value: Any = None
    unit: str = ""
    ref_range: str | None = None


class ValidatedMarker(CamelModel):
    """Marker whose code is known and whose value lies inside the plausibility interval."""
    name: str = Field(description="Marker name as it appeared in the report")
    code: str = Field(description="Code from the fixed marker vocabulary")
    value: float = Field(description="Numeric result value")
    unit: str = Field(default="", description="Unit of measurement")
    ref_range: str | None = Field(default=None, description="Raw reference range text")
    flag: str | None = None
    observed_at: str | None = None


class SummaryMarker(CamelModel):
    """Raw or validated marker posted by the client to the summary endpoint."""
    name: str | None = None
    code: str | None = None
    value: Any = None
    unit: str | None = None
    ref_range: Any = None
    flag: str | None = None
    observed_at: str | None = None
    source_snippet: str | None = None

    @field_validator("name", "code", "unit", "flag", "observed_at", "source_snippet", mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @classmethod
    def from_untrusted(cls, item: Any) -> "SummaryMarker":
        """Non-object entries become empty markers so every posted entry is still enriched."""
        return cls.model_validate(item if isinstance(item, dict) else {})


class UiHints(BaseModel):
    color: str
    icon: str


class EnrichedMarker(CamelModel):
    name: str | None = None
    code: str | None = None
    value: float | None = None
    unit: str | None = None
    ref_range: Any = None
    flag: str | None = None
    observed_at: str | None = None
    source_snippet: str | None = None
    status: str
    confidence: str
    severity: str
    urgency: str
    recommended_recheck_days: int
    immediate_attention: bool
    ui_hints: UiHints
