"""Application exceptions and the centralized error-to-response mapping."""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ValidationException(HTTPException):
    def __init__(self, errors):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=errors)


class UnauthorizedException(HTTPException):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=message)


class NotFoundException(HTTPException):
    def __init__(self, resource: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"{resource} is not found"
        )


class ConflictException(HTTPException):
    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def format_validation_errors(errors) -> list[dict]:
    """
    Turn pydantic error entries into ``{"field", "message"}`` pairs.

    The leading location segment (``body``, ``query``, ``path``) is dropped
    so that ``("body", "username")`` is reported as ``username``.

    Args:
        errors: Sequence of error dicts as returned by ``exc.errors()``.

    Returns:
        list[dict]: One entry per violated field.
    """
    result = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        result.append({"field": ".".join(loc) or "body", "message": error["msg"]})
    return result


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"errors": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = format_validation_errors(exc.errors())
    return await http_exception_handler(request, ValidationException(errors))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"errors": "Internal Server Error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error handlers that produce the ``{errors}`` envelope."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
