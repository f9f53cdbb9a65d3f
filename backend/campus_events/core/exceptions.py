"""
Error taxonomy for the ticketing and moderation services.

Each error is an HTTPException so services can raise it directly and
FastAPI renders it as ``{"detail": ...}`` with the matching status code.
None of them are retried server-side.
"""

from typing import Any, Optional

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[Any] = None, headers: Optional[dict[str, str]] = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail if detail is not None else self.default_detail,
            headers=headers,
        )


class Unauthenticated(ServiceError):
    """No bearer token, or one that fails signature/expiry checks."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid or expired token"

    def __init__(self, detail: Optional[Any] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(ServiceError):
    """Valid token, wrong role."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ValidationFailed(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Validation error"


class DuplicatePurchase(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "You have already purchased this event"


class AccountExists(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Account already exists"


class InternalError(ServiceError):
    pass
