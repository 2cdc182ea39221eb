"""Enumerations for the gateway domain model."""

from enum import Enum


class OrderStatus(str, Enum):
    """Storefront order states the gateway reads and writes."""

    PENDING = "pending"
    ON_HOLD = "on-hold"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


# Orders in these states have been paid and never need payment again.
PAID_STATUSES = frozenset({OrderStatus.PROCESSING, OrderStatus.COMPLETED})


class ProviderPaymentStatus(str, Enum):
    """Payment states reported by Wonderful Payments.

    The provider may add values at any time, so raw strings that are not
    listed here must still be handled by callers.
    """

    COMPLETED = "completed"
    ACCEPTED = "accepted"
    PENDING = "pending"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    ERRORED = "errored"
    EXPIRED = "expired"


class BankStatus(str, Enum):
    """Availability of a bank as reported by /v2/supported-banks."""

    ONLINE = "online"
    ISSUES = "issues"
    OFFLINE = "offline"


class NoticeSeverity(str, Enum):
    """Severity of a payer-visible checkout notice."""

    ERROR = "error"
    NOTICE = "notice"
    SUCCESS = "success"
