from wonderful_gateway.models.enums import (
    PAID_STATUSES,
    BankStatus,
    NoticeSeverity,
    OrderStatus,
    ProviderPaymentStatus,
)
from wonderful_gateway.models.order import AuditLog, Base, CheckoutNotice, Order, OrderNote

__all__ = [
    "Base",
    "Order",
    "OrderNote",
    "CheckoutNotice",
    "AuditLog",
    "OrderStatus",
    "PAID_STATUSES",
    "ProviderPaymentStatus",
    "BankStatus",
    "NoticeSeverity",
]
