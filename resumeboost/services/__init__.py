"""Services module exports."""

from .errors import (
    AmountMismatch,
    AuthenticationError,
    CouponAlreadyUsed,
    CouponExhausted,
    InvalidCoupon,
    InvalidPlan,
    NotFound,
    PermissionDenied,
    ServiceError,
    UpstreamError,
    ValidationError,
)
from .status_projector import project

__all__ = [
    "AmountMismatch",
    "AuthenticationError",
    "CouponAlreadyUsed",
    "CouponExhausted",
    "InvalidCoupon",
    "InvalidPlan",
    "NotFound",
    "PermissionDenied",
    "ServiceError",
    "UpstreamError",
    "ValidationError",
    "project",
]
