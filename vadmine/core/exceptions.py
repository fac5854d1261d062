from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse


class AppError(Exception):
    """Base application error with consistent schema."""

    def __init__(
        self,
        message: str,
        code: str = "ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class NotAuthenticatedError(AppError):
    """No identity present; raised before any ledger access."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, code="UNAUTHORIZED", status_code=status.HTTP_401_UNAUTHORIZED)


class NotFoundError(AppError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND", status_code=status.HTTP_404_NOT_FOUND)


class LedgerMissingError(NotFoundError):
    """Ledger document absent. Claim operations treat this as a zero-reward no-op instead."""

    def __init__(self, uid: str):
        self.uid = uid
        super().__init__("Reward ledger not found")


class BadRequestError(AppError):
    def __init__(self, message: str = "Bad request", details: dict[str, Any] | None = None):
        super().__init__(message, code="BAD_REQUEST", status_code=status.HTTP_400_BAD_REQUEST, details=details)


class TransactionConflictError(AppError):
    """Concurrent writes kept winning; raised once the store's retries are exhausted."""

    def __init__(self, uid: str, attempts: int):
        super().__init__(
            "Ledger is busy, try again",
            code="CONFLICT",
            status_code=status.HTTP_409_CONFLICT,
            details={"attempts": attempts},
        )
        self.uid = uid
        self.attempts = attempts


class AdNotCompletedError(AppError):
    """The rewarded ad failed, was skipped, timed out or could not be verified."""

    def __init__(self, message: str = "Ad was not completed", reason: str = "failed"):
        super().__init__(
            message,
            code="AD_NOT_COMPLETED",
            status_code=status.HTTP_424_FAILED_DEPENDENCY,
            details={"reason": reason},
        )
        self.reason = reason


class RewardOperationError(AppError):
    """Generic failure surfaced to the client as a retry prompt."""

    def __init__(self, operation: str, message: str = "Claim failed. Try again."):
        super().__init__(
            message,
            code="REWARD_FAILED",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details={"operation": operation},
        )
        self.operation = operation


def error_response(request: Request, exc: AppError) -> ORJSONResponse:
    body = {
        "error": {
            "message": exc.message,
            "code": exc.code,
            "details": exc.details,
        }
    }
    if hasattr(request.state, "request_id"):
        body["request_id"] = request.state.request_id
    return ORJSONResponse(status_code=exc.status_code, content=body)


async def app_exception_handler(request: Request, exc: AppError) -> ORJSONResponse:
    return error_response(request, exc)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    body = {
        "error": {
            "message": "Validation error",
            "code": "VALIDATION_ERROR",
            "details": {"errors": exc.errors()},
        }
    }
    if hasattr(request.state, "request_id"):
        body["request_id"] = request.state.request_id
    return ORJSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=body,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    from vadmine.core.logging import get_logger
    get_logger(__name__).exception("unhandled_exception", exc_info=exc)
    body = {
        "error": {
            "message": "Internal server error",
            "code": "INTERNAL_ERROR",
            "details": {},
        }
    }
    if hasattr(request.state, "request_id"):
        body["request_id"] = request.state.request_id
    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body,
    )
