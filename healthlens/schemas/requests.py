from typing import Any

from pydantic import BaseModel

from healthlens.schemas.markers import ValidatedMarker


class ParseRequest(BaseModel):
    # Presence and type of text are checked by the route so a bad body maps to PARSE_FAILED.
    text: Any = None
    locale: Any = None


class ParseResponse(BaseModel):
    markers: list[ValidatedMarker]


class SummaryRequest(BaseModel):
    # Checked by the route: anything but a non-empty list maps to AI_FAILED.
    markers: Any = None
    language: Any = "en"


class OcrFileMeta(BaseModel):
    pages: int
    engine: str


class OcrFileResult(BaseModel):
    originalname: str | None
    text: str | None = None
    meta: OcrFileMeta | None = None
    error: str | None = None
    code: str | None = None
