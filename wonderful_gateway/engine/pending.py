"""
Pending notifier.

Called from the provider's redirect flow once a payment has been created but
before the payer returns. Both ids come from the caller unauthenticated, so
the only effect is moving the order to "pending" with a note; if the store
refuses (e.g. the webhook already marked the order paid) the error is
logged and nothing else happens.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from wonderful_gateway.audit.logger import log_event
from wonderful_gateway.engine.errors import OrderNotFoundError
from wonderful_gateway.models.enums import OrderStatus
from wonderful_gateway.store.base import OrderStore

logger = logging.getLogger("wonderful_gateway.pending")


@dataclass(frozen=True)
class PendingOutcome:
    order_id: int
    updated: bool


class PendingNotifier:
    def __init__(self, session: AsyncSession, store: OrderStore):
        self._session = session
        self._store = store

    async def notify(self, wonderful_payment_id: str, order_id: str) -> PendingOutcome:
        """
        Mark the order as awaiting payment.

        Raises:
            OrderNotFoundError: No such order.
        """
        order = await self._store.get_order(order_id)
        if order is None:
            logger.error("Pending callback for payment %s: order %s not found", wonderful_payment_id, order_id)
            raise OrderNotFoundError(order_id)

        updated = await self._store.update_status(order, OrderStatus.PENDING)
        if updated:
            await self._store.add_note(order, f"Payment Created - Wonderful Payments ID:{wonderful_payment_id}")
        else:
            logger.error("Order status update failed")

        await log_event(self._session, "pending_notified", order_id=order.id, details={
            "wonderful_payment_id": wonderful_payment_id,
            "updated": updated,
        })
        return PendingOutcome(order_id=order.id, updated=updated)
