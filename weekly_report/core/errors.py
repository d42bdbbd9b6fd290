# weekly_report/core/errors.py
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import exc as sa_exc
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class InvalidRequest(Exception):
    """Missing or malformed input, rejected before any store access."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SaveFailed(Exception):
    def __init__(self, message: str, result=None):
        super().__init__(message)
        self.message = message
        self.result = result


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if location:
        return f"Invalid request: {location}: {first.get('msg')}"
    return f"Invalid request: {first.get('msg')}"


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as ``{"error": message}``."""

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(400, _describe_validation_error(exc))

    @app.exception_handler(InvalidRequest)
    async def invalid_request_handler(request: Request, exc: InvalidRequest):
        return error_response(400, exc.message)

    @app.exception_handler(SaveFailed)
    async def save_failed_handler(request: Request, exc: SaveFailed):
        result = exc.result
        if result is not None:
            logger.error("Save rejected on %s %s: %s via %s, %d row(s) written: %s",
                         request.method, request.url.path, result.outcome.value,
                         result.strategy, result.written, result.error)
        return error_response(500, exc.message)

    @app.exception_handler(sa_exc.SQLAlchemyError)
    async def database_error_handler(request: Request, exc: sa_exc.SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return error_response(500, "Database error")
