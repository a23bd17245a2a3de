"""
Error translation and handlers.

Maps domain exceptions to HTTP status codes and renders every error as
``{"success": false, "error": <message>}``.
"""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.domain.exceptions import (
    AccountError,
    AccountNotFound,
    DuplicateAccount,
    EmailNotVerified,
    InvalidCredentials,
    InvalidInput,
    VerificationFailed,
)
from src.domain.otp import OtpCheck

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server Error"

_OTP_MESSAGES = {
    OtpCheck.NO_OTP_SET: "No OTP set. Please request a new one.",
    OtpCheck.EXPIRED: "OTP expired. Please request a new one.",
    OtpCheck.MISMATCH: "Invalid OTP",
}


def to_http_exception(error: AccountError) -> HTTPException:
    """
    Translate a domain error into an HTTPException.

    Unknown AccountError subclasses become a generic 500 so no internal
    detail reaches the client.
    """
    if isinstance(error, InvalidInput):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, DuplicateAccount):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists",
        )
    if isinstance(error, VerificationFailed):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_OTP_MESSAGES.get(error.check, "Invalid OTP"),
        )
    if isinstance(error, AccountNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if isinstance(error, InvalidCredentials):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if isinstance(error, EmailNotVerified):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Email not verified. Please check your email for the OTP or request a new one.",
        )

    logger.error("Unmapped domain error: %r", error)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=SERVER_ERROR_MESSAGE)


def _error_body(message: str) -> dict:
    return {"success": False, "error": message}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 with a readable message."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(", ".join(messages) or "Invalid request"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(SERVER_ERROR_MESSAGE),
    )


def install_error_handlers(app: FastAPI) -> None:
    """Register the error envelope handlers on an application."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
