"""
Newsletter subscription module
"""

from .manager import (
    SubscriptionManager,
    SubscribeResult,
    SubscriptionError,
    InvalidEmailError,
    SubscriptionConflictError,
    SubscriptionNotFoundError,
    normalize_email,
)

__all__ = [
    "SubscriptionManager",
    "SubscribeResult",
    "SubscriptionError",
    "InvalidEmailError",
    "SubscriptionConflictError",
    "SubscriptionNotFoundError",
    "normalize_email",
]
