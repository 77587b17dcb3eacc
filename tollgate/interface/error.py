"""Interface layer errors and the fault boundary.

Exceptions that escape a use case are rendered as a generic OAuth error
object; the HTTP status comes from the exception's classification.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tollgate.domain.error import (
    AuthenticationError,
    DomainError,
    NotFoundError,
    PolicyViolationError,
    ValidationError,
)
from tollgate.domain.value import OAuthErrorType
from tollgate.util.error import UtilError

logger = logging.getLogger(__name__)


class InterfaceError(Exception):
    """Base interface error."""

    pass


class BadRequestError(InterfaceError):
    """Request could not be parsed."""

    pass


def root_cause(exc: BaseException) -> BaseException:
    while exc.__cause__ is not None:
        exc = exc.__cause__
    return exc


def fault_status(exc: BaseException) -> int:
    """HTTP status for an unhandled exception."""
    if isinstance(exc, AuthenticationError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, PolicyViolationError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, (ValidationError, BadRequestError)):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def fault_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = fault_status(exc)
    if status_code >= 500:
        logger.exception(f"Unhandled error on {request.url.path}", exc_info=exc)
    else:
        logger.info(f"Request to {request.url.path} failed: {exc}")

    return JSONResponse(
        status_code=status_code,
        content={
            "error": OAuthErrorType.UNSPECIFIED_ERROR.value,
            "error_description": str(root_cause(exc)),
        },
        headers={"Cache-Control": "no-store"},
    )


def register_fault_handlers(app: FastAPI) -> None:
    """Install the fault boundary on the application."""
    for exc_class in (DomainError, UtilError, InterfaceError, Exception):
        app.add_exception_handler(exc_class, fault_handler)
