"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from fairlend_db import PersistenceError, get_db_service
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .core.config import settings
from .core.errors import UpstreamRateLimited, WorkflowError
from .inference import log_inference_status
from .routes import appeals, applications, health, notifications
from .schemas.error import ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    log_inference_status()
    yield
    await get_db_service().close()


app = FastAPI(
    title="FairLend API",
    description="AI loan decisions with customer appeals and notifications",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    422: "Unprocessable Entity",
    429: "Too Many Requests",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
}

_RETRY_AFTER_SECONDS = "60"


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", str(uuid.uuid4()))


def _build_error(status_code: int, detail: str, request_id: str, kind: str = "") -> ErrorResponse:
    return ErrorResponse(
        type="about:blank",
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        kind=kind,
        request_id=request_id,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    body = _build_error(exc.status_code, str(exc.detail), _request_id(request))
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    body = _build_error(422, str(exc.errors()), _request_id(request), kind="ValidationError")
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(WorkflowError)
async def workflow_exception_handler(request: Request, exc: WorkflowError):
    """Map typed service failures to their HTTP status and kind."""
    request_id = _request_id(request)
    if exc.status_code >= 500:
        logger.error("%s (request_id=%s): %s", exc.kind, request_id, exc.detail)
    body = _build_error(exc.status_code, exc.detail, request_id, kind=exc.kind)
    headers = {"Retry-After": _RETRY_AFTER_SECONDS} if isinstance(exc, UpstreamRateLimited) else None
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(), headers=headers)


@app.exception_handler(PersistenceError)
async def persistence_exception_handler(request: Request, exc: PersistenceError):
    request_id = _request_id(request)
    logger.error("Persistence failure in %s (request_id=%s)", exc.operation, request_id)
    body = _build_error(
        503, "The database is temporarily unavailable.", request_id, kind="PersistenceError"
    )
    return JSONResponse(status_code=503, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    request_id = _request_id(request)
    logger.exception("Unhandled exception (request_id=%s)", request_id)
    body = _build_error(500, "An unexpected error occurred.", request_id)
    return JSONResponse(status_code=500, content=body.model_dump())


app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(applications.router, prefix="/api/applications", tags=["applications"])
app.include_router(appeals.router, prefix="/api/appeals", tags=["appeals"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": "Welcome to the FairLend API"}
