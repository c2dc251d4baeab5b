"""Error taxonomy shared by services and the API layer."""

from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base class for errors surfaced to API callers as a structured body."""

    kind = "ServiceError"
    http_status = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {
            "error": self.message,
            "kind": self.kind,
            "status": "failed",
        }
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(ServiceError):
    kind = "ValidationError"


class InvalidPlan(ServiceError):
    kind = "InvalidPlan"


class InvalidCoupon(ServiceError):
    kind = "InvalidCoupon"


class CouponAlreadyUsed(ServiceError):
    kind = "CouponAlreadyUsed"


class CouponExhausted(ServiceError):
    kind = "CouponExhausted"


class AmountMismatch(ServiceError):
    kind = "AmountMismatch"


class AuthenticationError(ServiceError):
    kind = "AuthenticationError"
    http_status = 401


class NotFound(ServiceError):
    kind = "NotFound"
    http_status = 404


class UpstreamError(ServiceError):
    """A store or third-party call failed."""

    kind = "UpstreamError"
    http_status = 502


class PermissionDenied(ServiceError):
    kind = "PermissionDenied"
    http_status = 403
