import logging
from contextlib import contextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError


class ApiError(Exception):
    status_code = 500

    def __init__(self, message: str, cause: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def to_body(self) -> dict:
        body = {"message": self.message}
        if self.cause:
            body["error"] = self.cause
        return body


class InvalidArgument(ApiError):
    status_code = 400


class NotFound(ApiError):
    status_code = 404


class StoreUnavailable(ApiError):
    status_code = 500


@contextmanager
def store_errors(operation: str):
    """Re-raise driver failures inside the block as StoreUnavailable."""
    try:
        yield
    except PyMongoError as e:
        raise StoreUnavailable(f"Error in {operation}", cause=str(e)) from e


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logging.error(f"{exc.message} on {request.url.path}: {exc.cause}")
        else:
            logging.warning(f"{exc.message} on {request.url.path}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logging.warning(f"Invalid request on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid request", "error": str(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        # Full detail goes to the log only; it can carry stored documents
        logging.error(f"Unhandled error on {request.url.path}: {str(exc)}")
        return JSONResponse(
            status_code=500,
            content={"message": "Internal server error", "error": type(exc).__name__},
        )
