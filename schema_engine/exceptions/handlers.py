"""FastAPI exception handlers for applications that expose resolved schemas.

The engine itself has no HTTP surface. Host applications call
``register_exception_handlers(app)`` so that resolution failures reach end
users as one generic message, distinguishing only configuration problems
from transient ones.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from schema_engine.exceptions.base import InvalidArgumentError, LockTimeoutError, SchemaEngineError
from schema_engine.logging import get_correlation_id, get_logger

logger = get_logger(__name__)

FIELD_CONFIGURATION_ERROR_MESSAGE = "Could not load field configuration"
LOCK_TIMEOUT_RETRY_AFTER_SECONDS = 1


def _error_body(code: str, exc: SchemaEngineError) -> dict:
    return {
        "error": {
            "code": code,
            "message": FIELD_CONFIGURATION_ERROR_MESSAGE,
            "retryable": exc.retryable,
            "details": exc.details,
            "correlation_id": get_correlation_id(),
        }
    }


async def invalid_argument_exception_handler(request: Request, exc: InvalidArgumentError) -> JSONResponse:
    """Bad resolution context: a user or configuration problem."""
    logger.warning(
        "field_configuration_invalid_argument",
        path=request.url.path,
        error_code=exc.error_code,
        error_message=exc.message,
        details=exc.details,
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("FIELD_CONFIGURATION_INVALID", exc),
    )


async def lock_timeout_exception_handler(request: Request, exc: LockTimeoutError) -> JSONResponse:
    """Build lock contention: transient, the caller may retry."""
    logger.warning(
        "field_configuration_lock_timeout",
        path=request.url.path,
        details=exc.details,
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=_error_body("FIELD_CONFIGURATION_BUSY", exc),
        headers={"Retry-After": str(LOCK_TIMEOUT_RETRY_AFTER_SECONDS)},
    )


async def schema_engine_exception_handler(request: Request, exc: SchemaEngineError) -> JSONResponse:
    """Any other engine error."""
    logger.error(
        "field_configuration_error",
        path=request.url.path,
        error_code=exc.error_code,
        error_message=exc.message,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("FIELD_CONFIGURATION_ERROR", exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the engine's exception handlers to a FastAPI application."""
    app.add_exception_handler(InvalidArgumentError, invalid_argument_exception_handler)
    app.add_exception_handler(LockTimeoutError, lock_timeout_exception_handler)
    app.add_exception_handler(SchemaEngineError, schema_engine_exception_handler)
