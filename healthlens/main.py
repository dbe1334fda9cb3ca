import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from healthlens.config import settings
from healthlens.errors import ApiError, error_response
from healthlens.middleware import build_limiter, install_middleware
from healthlens.routers import labs, nlp, ocr, system

logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="HealthLens API", version="0.1.0")

limiter = build_limiter(settings)
install_middleware(app, limiter)

allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins or ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup_event():
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set in environment variables")


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return error_response(request, exc.code, exc.message, exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return error_response(request, "NOT_FOUND", "Endpoint not found", 404)
    return error_response(request, "HTTP_ERROR", str(exc.detail) if exc.detail else "Request failed", exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(
        request,
        "VALIDATION_ERROR",
        "Invalid request payload",
        422,
        details={"errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled server error: %s", exc)
    return error_response(request, "INTERNAL_ERROR", "Internal server error", 500)


app.include_router(system.router)
app.include_router(ocr.router)
app.include_router(labs.router)
app.include_router(nlp.router)
