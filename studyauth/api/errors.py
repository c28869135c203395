"""
HTTP error mapping for domain exceptions.

Each domain error kind maps to one status code and one fixed message.
Security-boundary failures never echo the exception's own text; only
ValidationError messages, which describe the client's input, are passed
through.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from studyauth.domain.exceptions import (
    AlreadyRegistered,
    Conflict,
    Forbidden,
    IdentityError,
    InternalError,
    InvalidOTP,
    InvalidToken,
    NotFound,
    ServiceUnavailable,
    Unauthenticated,
    Unauthorized,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_RESPONSES: dict[type[IdentityError], tuple[int, str]] = {
    AlreadyRegistered: (status.HTTP_409_CONFLICT, "User already registered"),
    Conflict: (status.HTTP_409_CONFLICT, "User already exists"),
    InvalidOTP: (status.HTTP_400_BAD_REQUEST, "The OTP is not valid"),
    Unauthorized: (status.HTTP_401_UNAUTHORIZED, "Invalid credentials"),
    Unauthenticated: (status.HTTP_401_UNAUTHORIZED, "Authentication required"),
    InvalidToken: (status.HTTP_401_UNAUTHORIZED, "Authentication required"),
    Forbidden: (status.HTTP_403_FORBIDDEN, "Access denied"),
    NotFound: (status.HTTP_404_NOT_FOUND, "User not found"),
    ServiceUnavailable: (status.HTTP_503_SERVICE_UNAVAILABLE, "Service temporarily unavailable"),
    InternalError: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"),
}


def error_response_for(exc: IdentityError) -> tuple[int, str]:
    """Status code and client-facing message for a domain error."""
    if isinstance(exc, ValidationError):
        return 422, str(exc) or "Invalid request"
    for error_type, response in ERROR_RESPONSES.items():
        if isinstance(exc, error_type):
            return response
    return ERROR_RESPONSES[InternalError]


async def identity_error_handler(request: Request, exc: IdentityError) -> JSONResponse:
    status_code, detail = error_response_for(exc)
    logger.debug("%s %s -> %d (%s)", request.method, request.url.path, status_code, type(exc).__name__)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=status_code, content={"detail": detail}, headers=headers)


def install_error_handlers(app: FastAPI) -> None:
    """Register the domain error handler on app."""
    app.add_exception_handler(IdentityError, identity_error_handler)
