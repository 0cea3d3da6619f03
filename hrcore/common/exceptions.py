"""Custom exceptions and RFC 7807 Problem Detail error handlers."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

BASE_ERROR_URI = "https://hr-core.local/errors"


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all application exceptions → RFC 7807 JSON."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)


class NotFoundException(AppException):
    """404 — entity not found."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            status_code=404,
            error_type="not-found",
            title=f"{entity_type} Not Found",
            detail=f"{entity_type} with id '{entity_id}' does not exist.",
        )


class DuplicateEntryException(AppException):
    """409 — a record with the same unique key already exists."""

    def __init__(self, field: str, value: Any, detail: Optional[str] = None) -> None:
        self.field = field
        self.value = value
        super().__init__(
            status_code=409,
            error_type="duplicate-entry",
            title="Duplicate Entry",
            detail=detail or f"An entry with {field}='{value}' already exists.",
            errors={field: [f"'{value}' is already in use."]},
        )


class ValidationException(AppException):
    """422 — business-logic validation failures.

    Accepts either the ordered list of violated rules produced by the
    validators in :mod:`hrcore.common.validators`, or a field → messages map.
    """

    def __init__(
        self,
        errors: Union[Sequence[str], dict[str, list[str]]],
    ) -> None:
        if isinstance(errors, dict):
            field_errors = dict(errors)
            self.violations = [m for msgs in field_errors.values() for m in msgs]
        else:
            self.violations = list(errors)
            field_errors = {"violations": self.violations}
        super().__init__(
            status_code=422,
            error_type="validation-error",
            title="Validation Error",
            detail="One or more fields failed validation.",
            errors=field_errors,
        )


class InsufficientBalanceException(AppException):
    """422 — leave request exceeds the remaining balance for its category."""

    def __init__(self, leave_type: str, available: int, requested: int) -> None:
        self.leave_type = leave_type
        self.available = available
        self.requested = requested
        super().__init__(
            status_code=422,
            error_type="insufficient-balance",
            title="Insufficient Leave Balance",
            detail=(
                f"Insufficient {leave_type} leave balance. "
                f"Available: {available}, Requested: {requested}."
            ),
            errors={"balance": {"available": available, "requested": requested}},
        )


class InvalidTransitionException(AppException):
    """409 — the requested status change is not allowed."""

    def __init__(self, entity_type: str, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(
            status_code=409,
            error_type="invalid-transition",
            title="Invalid Status Transition",
            detail=f"{entity_type} cannot move from '{current}' to '{target}'.",
        )


class ConcurrentModificationException(AppException):
    """409 — a compare-and-set update lost the race to another request."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(
            status_code=409,
            error_type="conflict",
            title="Conflict",
            detail=(
                f"{entity_type} '{entity_id}' was modified by another request. "
                "Reload and try again."
            ),
        )


class SequenceExhaustedException(AppException):
    """409 — an auto-numbered identifier has no values left."""

    def __init__(self, sequence: str, last: str) -> None:
        self.sequence = sequence
        self.last = last
        super().__init__(
            status_code=409,
            error_type="sequence-exhausted",
            title="Sequence Exhausted",
            detail=(
                f"No {sequence} is left after '{last}'. "
                "Supply one explicitly."
            ),
        )


# ── RFC 7807 builder ────────────────────────────────────────────────

def _build_problem_detail(exc: AppException, request: Request) -> dict[str, Any]:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{exc.error_type}",
        "title": exc.title,
        "status": exc.status_code,
        "detail": exc.detail,
        "instance": str(request.url.path),
    }
    if exc.errors:
        body["errors"] = exc.errors
    return body


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_build_problem_detail(exc, request),
        media_type="application/problem+json",
    )


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        name = (
            ".".join(str(p) for p in loc[1:])
            if len(loc) > 1
            else str(loc[0]) if loc else "unknown"
        )
        field_errors.setdefault(name, []).append(err.get("msg", "Invalid value"))

    return JSONResponse(
        status_code=422,
        content={
            "type": f"{BASE_ERROR_URI}/validation-error",
            "title": "Validation Error",
            "status": 422,
            "detail": "Request validation failed.",
            "instance": str(request.url.path),
            "errors": field_errors,
        },
        media_type="application/problem+json",
    )


async def _handle_unexpected_error(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "type": f"{BASE_ERROR_URI}/internal-error",
            "title": "Internal Server Error",
            "status": 500,
            "detail": "An unexpected error occurred.",
            "instance": str(request.url.path),
        },
        media_type="application/problem+json",
    )


# ── Registration helper (called from main.py) ──────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""
    app.add_exception_handler(AppException, _handle_app_exception)          # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _handle_unexpected_error)
