"""Error taxonomy shared by services and routers.

Every error is an ``HTTPException`` so FastAPI can render it, and carries a
stable ``code`` that clients can switch on.
"""

from typing import Any

from fastapi import HTTPException


class ApiError(HTTPException):
    """Base class for errors surfaced to HTTP callers."""

    status_code: int = 500
    code: str = "internal_error"
    default_detail: str = "Internal Server Error"

    def __init__(self, detail: str | None = None, *, headers: dict[str, str] | None = None):
        super().__init__(
            status_code=type(self).status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )

    def to_body(self) -> dict[str, Any]:
        return {"error": self.code, "detail": self.detail}


class UnauthorizedError(ApiError):
    status_code = 401
    code = "unauthorized"
    default_detail = "Unauthorized Access!"

    def __init__(self, detail: str | None = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(ApiError):
    status_code = 403
    code = "forbidden"
    default_detail = "Forbidden Access!"


class NotFoundError(ApiError):
    status_code = 404
    code = "not_found"
    default_detail = "Resource not found"


class OutOfStockError(ApiError):
    status_code = 409
    code = "out_of_stock"
    default_detail = "Product is out of stock"


class DuplicatePaymentError(ApiError):
    """Raised by the order store when a transaction id was already recorded."""

    status_code = 409
    code = "duplicate_payment"
    default_detail = "Payment has already been fulfilled"

    def __init__(self, transaction_id: str):
        super().__init__(f"Order already exists for transaction {transaction_id}")
        self.transaction_id = transaction_id


class UpstreamServiceError(ApiError):
    status_code = 502
    code = "upstream_failure"
    default_detail = "Upstream service failure"


class PaymentLookupError(UpstreamServiceError):
    default_detail = "Failed to retrieve payment session"


class PaymentSessionNotFoundError(PaymentLookupError):
    status_code = 404
    code = "not_found"
    default_detail = "Payment session not found"
