"""SQLAlchemy models for the gateway's view of storefront orders."""

import secrets
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, relationship

from wonderful_gateway.models.enums import OrderStatus


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_order_key() -> str:
    return f"wc_order_{secrets.token_hex(8)}"


class Order(Base):
    """
    A storefront order awaiting (or past) payment.

    The storefront owns this record; the gateway only reads the checkout
    fields and moves `status` through the order store. `transaction_id` holds
    the merchant payment reference once the payment is complete.
    """

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_key = Column(String(40), nullable=False, unique=True, default=_new_order_key)
    total = Column(Float, nullable=False)
    currency = Column(String(3), default="GBP")
    billing_email = Column(String(200), nullable=True)
    customer_ip = Column(String(45), nullable=True)
    customer_user_agent = Column(String(500), nullable=True)

    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value)
    transaction_id = Column(String(100), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    notes = relationship("OrderNote", back_populates="order", lazy="raise")

    @property
    def number(self) -> str:
        """Order number as shown to the customer and embedded in references."""
        return str(self.id)


class OrderNote(Base):
    """Append-only note on an order, visible to the merchant."""

    __tablename__ = "order_notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    note = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    order = relationship("Order", back_populates="notes")


class CheckoutNotice(Base):
    """
    Payer-visible message queued for the storefront to display.

    Notices are consumed once: the storefront reads them on its next page
    render and they are marked as shown.
    """

    __tablename__ = "checkout_notices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    message = Column(Text, nullable=False)
    severity = Column(String(10), nullable=False)
    shown = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class AuditLog(Base):
    """
    Immutable operator-facing audit entry.

    Every checkout attempt, provider callback and status change gets a row.
    Technical detail (provider status codes, raw statuses) lives here and
    never in payer-visible notices.
    """

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True, index=True)
    action = Column(String(50), nullable=False)
    details = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), default=_utcnow)
