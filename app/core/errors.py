from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import DocPortalError, StorageError
from app.schemas.response import ErrorResponse
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "An internal error occurred. Please try again later."


def _request_context(request: Request) -> dict:
    return {
        "method": request.method,
        "url": str(request.url),
        "client": request.client.host if request.client else "unknown"
    }


def add_exception_handlers(app: FastAPI):
    """
    Registers exception handlers with the FastAPI app.
    """
    @app.exception_handler(StorageError)
    async def storage_exception_handler(request: Request, exc: StorageError):
        """
        Storage failures are logged with context and hidden from the client.
        """
        logger.error(
            f"Storage error: {exc.message}",
            extra={**_request_context(request), "details": exc.details},
            exc_info=exc
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=GENERIC_ERROR_MESSAGE,
                code=exc.code,
                details=None
            ).model_dump()
        )

    @app.exception_handler(DocPortalError)
    async def docportal_exception_handler(request: Request, exc: DocPortalError):
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=exc.message,
                code=exc.code,
                details=exc.details
            ).model_dump()
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Handles standard HTTP exceptions (404, 405, etc.)
        """
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=str(exc.detail),
                code="HTTP_ERROR",
                details=None
            ).model_dump()
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Handles Pydantic validation errors as 400s with the first message up front.
        """
        errors = exc.errors()
        message = "Invalid input"
        if errors:
            message = str(errors[0].get("msg", message)).removeprefix("Value error, ")

        return JSONResponse(
            status_code=400,
            content=ErrorResponse(
                error=message,
                code="VALIDATION_ERROR",
                details=jsonable_encoder(errors, exclude={"ctx", "input"})
            ).model_dump()
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all for unhandled exceptions.
        """
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra=_request_context(request),
            exc_info=exc
        )

        message = str(exc) if settings.DEBUG else GENERIC_ERROR_MESSAGE

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error=message,
                code="INTERNAL_ERROR",
                details=None
            ).model_dump()
        )
