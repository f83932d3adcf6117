# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .routes import guarantors
from .schemas.error import ErrorResponse
from .services.errors import ErrorCode, GuarantorError, SubmissionBlockedError

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Guarantor Onboarding API",
    description="Qualification and self-service onboarding of rental policy guarantors",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    410: "Gone",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
}

# Engine error code -> HTTP status. Anything not listed is a 422.
_ERROR_STATUS: dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INVALID: 404,
    ErrorCode.EXPIRED: 410,
}


def _build_error(status_code: int, detail: str, request_id: str, **extra) -> ErrorResponse:
    return ErrorResponse(
        type="about:blank",
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        request_id=request_id,
        **extra,
    )


@app.exception_handler(GuarantorError)
async def guarantor_error_handler(request: Request, exc: GuarantorError):
    """Map engine errors to RFC 7807 Problem Details."""
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    status_code = _ERROR_STATUS.get(exc.code, 422)
    missing = exc.missing_requirements if isinstance(exc, SubmissionBlockedError) else None
    body = _build_error(
        status_code, exc.message, request_id, code=exc.code.value, missing_requirements=missing,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    body = _build_error(exc.status_code, str(exc.detail), request_id)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    body = _build_error(422, str(exc.errors()), request_id)
    return JSONResponse(status_code=422, content=body.model_dump(exclude_none=True))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    logger.exception("Unhandled exception (request_id=%s)", request_id)
    body = _build_error(500, "An unexpected error occurred.", request_id)
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


# Include routers
app.include_router(guarantors.router, prefix="/api/guarantors", tags=["guarantors"])
app.include_router(
    guarantors.self_service_router, prefix="/api/self-service", tags=["self-service"]
)


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}
