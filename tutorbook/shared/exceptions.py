"""Custom exception hierarchy and handlers."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    status_code = 400
    code = "app_error"
    # When True the request transaction is committed before the error is returned.
    commit_changes = False

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_payload(self) -> dict:
        return {"code": self.code, "message": self.message}


class NotFoundException(AppException):
    """Raised when entity is not found."""

    status_code = 404
    code = "not_found"


class ConflictException(AppException):
    """Raised when entity conflicts with current state."""

    status_code = 409
    code = "conflict"


class UnauthorizedException(AppException):
    """Raised when user has no rights for operation."""

    status_code = 403
    code = "forbidden"


class BusinessRuleException(AppException):
    """Raised when business rule validation fails."""

    status_code = 422
    code = "business_rule_violation"


class NotOwnerException(UnauthorizedException):
    """Raised when the requester does not own the booking they mutate."""

    code = "not_owner"


class SlotUnavailableException(ConflictException):
    """Raised when a new booking collides with an active one."""

    code = "slot_unavailable"


class InvalidStateException(ConflictException):
    """Raised when a lifecycle transition is not allowed from the current status."""

    code = "invalid_state"

    def __init__(self, message: str, current_status: str) -> None:
        self.current_status = current_status
        super().__init__(message)

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["current_status"] = str(self.current_status)
        return payload


class BookingExpiredException(BusinessRuleException):
    """Raised when payment arrives after the payment window closed."""

    code = "booking_expired"
    commit_changes = True


async def app_exception_handler(_: Request, exc: AppException) -> JSONResponse:
    """Handle custom domain exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.to_payload()},
    )


async def http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions in unified shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": "http_error", "message": str(exc.detail)}},
    )


async def unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"error": {"code": "internal_error", "message": "Internal server error"}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
