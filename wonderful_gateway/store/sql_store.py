"""
SQLAlchemy-backed order store.

Transition rules follow the storefront's order lifecycle:
  - moving an order to the status it already has is a no-op that succeeds
  - a paid (processing/completed) or refunded order is never moved by the gateway
  - payment can be completed from pending, on-hold, failed or cancelled, once

These rules are what make webhook delivery safe to repeat: a duplicate or
late callback either re-applies the same state or is refused.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlencode

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wonderful_gateway.audit.logger import log_event
from wonderful_gateway.config import settings
from wonderful_gateway.models.enums import PAID_STATUSES, OrderStatus
from wonderful_gateway.models.order import CheckoutNotice, Order, OrderNote
from wonderful_gateway.store.base import Notice, OrderStore

logger = logging.getLogger("wonderful_gateway.store")

LOCKED_STATUSES = PAID_STATUSES | {OrderStatus.REFUNDED}
PAYABLE_STATUSES = frozenset({
    OrderStatus.PENDING,
    OrderStatus.ON_HOLD,
    OrderStatus.FAILED,
    OrderStatus.CANCELLED,
})


class SqlOrderStore(OrderStore):
    """Order store over the gateway's database session."""

    def __init__(self, session: AsyncSession, site_url: Optional[str] = None):
        self._session = session
        self._site_url = (site_url or settings.site_url).rstrip("/")

    async def get_order(self, order_id: str) -> Optional[Order]:
        try:
            pk = int(str(order_id).strip())
        except ValueError:
            return None
        return await self._session.get(Order, pk)

    async def add_note(self, order: Order, text: str) -> None:
        self._session.add(OrderNote(order_id=order.id, note=text))
        await self._session.flush()

    async def update_status(self, order: Order, status: OrderStatus, reason: str = "") -> bool:
        target = OrderStatus(status)
        current = OrderStatus(order.status)

        if current == target:
            return True

        if current in LOCKED_STATUSES:
            logger.warning(
                "Refusing to move order %s from %s to %s", order.id, current.value, target.value
            )
            await log_event(self._session, "status_change_refused", order_id=order.id, details={
                "from": current.value,
                "to": target.value,
                "reason": reason,
            })
            return False

        order.status = target.value
        await log_event(self._session, "status_changed", order_id=order.id, details={
            "from": current.value,
            "to": target.value,
            "reason": reason,
        })
        await self._session.flush()
        return True

    async def mark_payment_complete(self, order: Order, reference: str) -> bool:
        current = OrderStatus(order.status)
        if current not in PAYABLE_STATUSES:
            await log_event(self._session, "payment_complete_skipped", order_id=order.id, details={
                "status": current.value,
                "reference": reference,
            })
            return False

        order.status = OrderStatus.PROCESSING.value
        order.transaction_id = reference
        order.paid_at = datetime.now(timezone.utc)
        await log_event(self._session, "payment_complete", order_id=order.id, details={
            "from": current.value,
            "reference": reference,
        })
        await self._session.flush()
        return True

    def return_url(self, order: Order) -> str:
        query = urlencode({"key": order.order_key})
        return f"{self._site_url}/checkout/order-received/{order.id}/?{query}"

    def checkout_payment_url(self, order: Order) -> str:
        query = urlencode({"pay_for_order": "true", "key": order.order_key})
        return f"{self._site_url}/checkout/order-pay/{order.id}/?{query}"


async def save_notices(session: AsyncSession, order_id: int, notices: list[Notice]) -> None:
    """Queue payer notices for the storefront's next render of this order."""
    for notice in notices:
        session.add(CheckoutNotice(order_id=order_id, message=notice.message, severity=notice.severity.value))
    await session.flush()


async def pop_notices(session: AsyncSession, order_id: int) -> list[CheckoutNotice]:
    """Return unshown notices for an order and mark them as shown."""
    result = await session.execute(
        select(CheckoutNotice)
        .where(CheckoutNotice.order_id == order_id, CheckoutNotice.shown.is_(False))
        .order_by(CheckoutNotice.id.asc())
    )
    notices = list(result.scalars().all())
    if notices:
        await session.execute(
            update(CheckoutNotice)
            .where(CheckoutNotice.id.in_([n.id for n in notices]))
            .values(shown=True)
        )
    return notices
