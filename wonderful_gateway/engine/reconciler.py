"""
Webhook status reconciler: the order state machine.

The provider (and the payer's browser, on return) calls us with nothing but
a `wonderfulPaymentId`. For each callback:

  1. Fetch the authoritative payment from the provider (never trust the caller)
  2. Extract the order number from the merchant payment reference
  3. Resolve the order
  4. Append an audit note with the provider id and raw status
  5. Apply exactly one transition from TRANSITIONS (unknown status → failed)

Any failure in steps 1-3 aborts the callback without touching an order; the
provider retries delivery. Steps 4-5 are safe to repeat: the order store
treats a move to the current status as a no-op and refuses to move paid
orders, so duplicate or reordered callbacks only add notes.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from wonderful_gateway.audit.logger import log_event
from wonderful_gateway.engine.errors import GENERIC_USER_MESSAGE, CorrelationError, OrderNotFoundError, ProviderError
from wonderful_gateway.engine.reference import extract_order_id
from wonderful_gateway.models.enums import PAID_STATUSES, NoticeSeverity, OrderStatus, ProviderPaymentStatus
from wonderful_gateway.providers.base import PaymentProvider
from wonderful_gateway.store.base import NoticeSink, OrderStore

logger = logging.getLogger("wonderful_gateway.webhook")

ON_HOLD_REASON = (
    "Payment has been processed but has not been confirmed. "
    "Please manually check payment status before order processing."
)


@dataclass(frozen=True)
class Transition:
    """What to do with an order for one provider status."""

    target: Optional[OrderStatus]  # None means "complete the payment"
    reason: str = ""
    notice: Optional[str] = None
    severity: NoticeSeverity = NoticeSeverity.ERROR
    to_return_page: bool = False

    @property
    def completes_payment(self) -> bool:
        return self.target is None


TRANSITIONS: dict[ProviderPaymentStatus, Transition] = {
    ProviderPaymentStatus.COMPLETED: Transition(target=None, to_return_page=True),
    ProviderPaymentStatus.ACCEPTED: Transition(OrderStatus.ON_HOLD, ON_HOLD_REASON, to_return_page=True),
    ProviderPaymentStatus.PENDING: Transition(OrderStatus.ON_HOLD, ON_HOLD_REASON, to_return_page=True),
    ProviderPaymentStatus.REJECTED: Transition(
        OrderStatus.FAILED,
        "Payment was rejected at the bank",
        "Your payment was rejected by your bank, you have not been charged. Please try again.",
    ),
    ProviderPaymentStatus.CANCELLED: Transition(
        OrderStatus.FAILED,
        "Payment was cancelled by the customer",
        "Your payment was cancelled.",
        NoticeSeverity.NOTICE,
    ),
    ProviderPaymentStatus.ERRORED: Transition(
        OrderStatus.FAILED,
        "Payment error during checkout",
        "Your payment errored during checkout, please try again.",
    ),
    ProviderPaymentStatus.EXPIRED: Transition(
        OrderStatus.FAILED,
        "Payment expired",
        "Your payment was not completed in time, you have not been charged. Please try again.",
    ),
}


def resolve_transition(status: str) -> Transition:
    """Map a raw provider status to its transition. Total over all strings."""
    try:
        return TRANSITIONS[ProviderPaymentStatus(status)]
    except ValueError:
        return Transition(
            OrderStatus.FAILED,
            f"Payment error: unknown payment state {status}",
            GENERIC_USER_MESSAGE,
        )


@dataclass(frozen=True)
class ReconcileOutcome:
    order_id: int
    provider_status: str
    order_status: str
    redirect_url: str


class WebhookReconciler:
    """Applies provider payment status to the matching order."""

    def __init__(
        self,
        session: AsyncSession,
        provider: PaymentProvider,
        store: OrderStore,
        notices: NoticeSink,
    ):
        self._session = session
        self._provider = provider
        self._store = store
        self._notices = notices

    async def reconcile(self, wonderful_payment_id: str) -> ReconcileOutcome:
        """
        Process one callback for `wonderful_payment_id`.

        Raises:
            ProviderError: Status could not be fetched.
            MalformedReferenceError: Provider returned an unparseable reference.
            OrderNotFoundError: Reference points at an order we do not have.
        """
        try:
            payment = await self._provider.get_payment(wonderful_payment_id)
            order_id = extract_order_id(payment.payment_reference)
            order = await self._store.get_order(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
        except (ProviderError, CorrelationError) as e:
            logger.error("Webhook for payment %s aborted: %s", wonderful_payment_id, e)
            await log_event(self._session, "webhook_aborted", details={
                "wonderful_payment_id": wonderful_payment_id,
                "error": str(e),
                "status_code": getattr(e, "status_code", None),
            })
            raise

        await self._store.add_note(
            order,
            f"Payment Update. Wonderful Payments ID: {payment.wonderful_payments_id}, Status: {payment.status}",
        )

        transition = resolve_transition(payment.status)

        if transition.completes_payment:
            await self._store.add_note(
                order,
                f"Payment Success. Order reference: {payment.payment_reference}, "
                f"Customer Bank: {payment.selected_aspsp}",
            )
            if not await self._store.mark_payment_complete(order, payment.payment_reference):
                logger.info("Order %s already paid; completion for %s ignored", order.id, wonderful_payment_id)
        else:
            previous = order.status
            if not await self._store.update_status(order, transition.target, transition.reason):
                logger.warning(
                    "Order %s stays %s; provider reported %s for %s",
                    order.id,
                    order.status,
                    payment.status,
                    wonderful_payment_id,
                )
            # No notice for redelivered or refused statuses.
            if transition.notice and order.status != previous:
                self._notices.add_notice(transition.notice, transition.severity)

        if transition.to_return_page or OrderStatus(order.status) in PAID_STATUSES:
            redirect_url = self._store.return_url(order)
        else:
            redirect_url = self._store.checkout_payment_url(order)

        await log_event(self._session, "webhook_applied", order_id=order.id, details={
            "wonderful_payment_id": payment.wonderful_payments_id,
            "provider_status": payment.status,
            "order_status": order.status,
        })

        return ReconcileOutcome(
            order_id=order.id,
            provider_status=payment.status,
            order_status=order.status,
            redirect_url=redirect_url,
        )
