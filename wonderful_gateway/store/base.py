"""
Collaborator interfaces owned by the storefront.

The gateway never touches order rows directly: it reads and moves orders
through an OrderStore and reports payer-visible messages through a
NoticeSink. The SQL implementations live in store.sql_store.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from wonderful_gateway.models.enums import NoticeSeverity, OrderStatus
from wonderful_gateway.models.order import Order


class OrderStore(ABC):
    """Access to storefront orders."""

    @abstractmethod
    async def get_order(self, order_id: str) -> Optional[Order]:
        """Return the order with this id/number, or None."""
        ...

    @abstractmethod
    async def add_note(self, order: Order, text: str) -> None:
        """Append a merchant-visible note. Notes are never edited or removed."""
        ...

    @abstractmethod
    async def update_status(self, order: Order, status: OrderStatus, reason: str = "") -> bool:
        """
        Move the order to `status`.

        Returns True when the order is in `status` afterwards (including when
        it already was), False when the store refused the transition.
        """
        ...

    @abstractmethod
    async def mark_payment_complete(self, order: Order, reference: str) -> bool:
        """
        Record a successful payment against the order.

        Returns False (and changes nothing) if the order was already paid.
        """
        ...

    @abstractmethod
    def return_url(self, order: Order) -> str:
        """Thank-you page the payer lands on after paying."""
        ...

    @abstractmethod
    def checkout_payment_url(self, order: Order) -> str:
        """Page where the payer can retry paying for the order."""
        ...


@dataclass(frozen=True)
class Notice:
    message: str
    severity: NoticeSeverity


class NoticeSink(ABC):
    """Destination for messages shown to the payer."""

    @abstractmethod
    def add_notice(self, message: str, severity: NoticeSeverity = NoticeSeverity.NOTICE) -> None:
        ...


@dataclass
class MemoryNoticeSink(NoticeSink):
    """Collects notices for the duration of one request."""

    notices: list[Notice] = field(default_factory=list)

    def add_notice(self, message: str, severity: NoticeSeverity = NoticeSeverity.NOTICE) -> None:
        self.notices.append(Notice(message=message, severity=NoticeSeverity(severity)))
