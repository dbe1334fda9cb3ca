from fastapi import Request
from fastapi.responses import JSONResponse


class ApiError(Exception):
    """Error surfaced to the client as ``{"error": {"code", "message"}, "rid"}``."""

    def __init__(self, code: str, message: str, status_code: int = 500):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


def request_id(request: Request) -> str | None:
    return getattr(request.state, "rid", None)


def error_response(request: Request, code: str, message: str, status_code: int = 500, **extra) -> JSONResponse:
    content = {"error": {"code": code, "message": message}, "rid": request_id(request)}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)
