"""Application-level exceptions and FastAPI exception handlers.

The engine reports every rejected command with one of the subclasses below,
never with a bare ``Exception``; the presentation layer picks how to render
each ``code``.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details
        super().__init__(message)

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | None = None):
        msg = f"{entity} not found" if not entity_id else f"{entity} '{entity_id}' not found"
        super().__init__(msg, status_code=404, code="NOT_FOUND")

class UnauthorizedError(AppException):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, status_code=401, code="UNAUTHORIZED")

class ValidationError(AppException):
    """Malformed input. ``errors`` maps every offending field to its messages."""

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        fields = ", ".join(sorted(errors))
        super().__init__(
            f"Validation failed: {fields}",
            status_code=422,
            code="VALIDATION_ERROR",
            details={"fields": errors},
        )

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls({field: [message]})

class AuthorizationError(AppException):
    """The actor lacks the capability; ``reason`` names what is missing."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason, status_code=403, code="FORBIDDEN")

class InvalidTransitionError(AppException):
    """The entity's current status does not permit the requested transition."""

    def __init__(self, entity: str, entity_id: str, current: str, action: str):
        self.entity = entity
        self.current = current
        self.action = action
        super().__init__(
            f"{entity} '{entity_id}' is {current}; cannot {action}",
            status_code=409,
            code="INVALID_TRANSITION",
            details={"status": current, "action": action},
        )

class AlreadyClaimedError(AppException):
    def __init__(self, submission_id: str, reviewer_id: str | None):
        self.reviewer_id = reviewer_id
        super().__init__(
            f"Submission '{submission_id}' is already under review by another admin",
            status_code=409,
            code="ALREADY_CLAIMED",
            details={"reviewerId": reviewer_id},
        )

class IneligibleAccountError(AppException):
    def __init__(self, account_id: str, reason: str = "account is not verified"):
        super().__init__(
            f"Account '{account_id}' cannot request payouts: {reason}",
            status_code=422,
            code="INELIGIBLE_ACCOUNT",
        )

class InsufficientBalanceError(AppException):
    def __init__(self, requested: Decimal, available: Decimal):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Requested {requested} exceeds available balance {available}",
            status_code=422,
            code="INSUFFICIENT_BALANCE",
            details={"requested": str(requested), "available": str(available)},
        )

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(code: str, message: str, details: dict[str, Any] | None = None) -> dict:
    body: dict[str, Any] = {"code": code, "message": message}
    if details:
        body["details"] = details
    return {"error": body}

def _field_path(loc: tuple) -> str:
    # ("body", "documents", 0, "kind") -> "documents[0].kind"
    path = ""
    for part in loc[1:] if loc and loc[0] in ("body", "query", "path", "header") else loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "request"

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        logger.info("%s %s refused: %s %s", request.method, request.url.path, exc.code, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors: dict[str, list[str]] = {}
        for err in exc.errors():
            errors.setdefault(_field_path(tuple(err.get("loc", ()))), []).append(err["msg"])
        wrapped = ValidationError(errors)
        return JSONResponse(
            status_code=wrapped.status_code,
            content=_error_body(wrapped.code, wrapped.message, wrapped.details),
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_error_body("NOT_FOUND", "Resource not found"),
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
