"""Store error kinds.

Each kind is an ``HTTPException`` so service functions can raise them and the
routers let them propagate straight to the client.
"""

from typing import Any, Optional

from fastapi import HTTPException, status


class StoreError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: Any, headers: Optional[dict[str, str]] = None):
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)


class ValidationError(StoreError):
    """Malformed input; the aggregate is left untouched."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(StoreError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(StoreError):
    """Stock, coupon or state-transition conflicts."""

    status_code = status.HTTP_409_CONFLICT


class InvariantViolation(StoreError):
    """Denormalized totals no longer match their source data."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
