"""Integration tests for the webhook status reconciler."""

import pytest

from wonderful_gateway.engine.errors import MalformedReferenceError, OrderNotFoundError, ProviderError
from wonderful_gateway.engine.reconciler import TRANSITIONS, WebhookReconciler, resolve_transition
from wonderful_gateway.models.enums import NoticeSeverity, OrderStatus, ProviderPaymentStatus
from wonderful_gateway.models.order import Order
from wonderful_gateway.store.base import MemoryNoticeSink
from wonderful_gateway.store.sql_store import SqlOrderStore

SITE_URL = "https://shop.example.co.uk"
REFERENCE = "WOO-AB12CD-1042"


def _reconciler(session, provider, notices=None):
    return WebhookReconciler(session, provider, SqlOrderStore(session, site_url=SITE_URL), notices or MemoryNoticeSink())


class TestTransitionTable:
    def test_every_known_status_has_a_row(self):
        assert set(TRANSITIONS) == set(ProviderPaymentStatus)

    def test_only_completed_completes_payment(self):
        completing = [s for s, t in TRANSITIONS.items() if t.completes_payment]
        assert completing == [ProviderPaymentStatus.COMPLETED]

    def test_unknown_status_fails_with_generic_notice(self):
        transition = resolve_transition("refund_requested")
        assert transition.target == OrderStatus.FAILED
        assert "refund_requested" in transition.reason
        assert transition.notice == "An unexpected error occurred while processing your payment."
        assert not transition.to_return_page


@pytest.mark.asyncio
@pytest.mark.parametrize("status, expected_status, to_return_page, notice_severity", [
    ("completed", "processing", True, None),
    ("accepted", "on-hold", True, None),
    ("pending", "on-hold", True, None),
    ("rejected", "failed", False, NoticeSeverity.ERROR),
    ("cancelled", "failed", False, NoticeSeverity.NOTICE),
    ("errored", "failed", False, NoticeSeverity.ERROR),
    ("expired", "failed", False, NoticeSeverity.ERROR),
    ("anything-else", "failed", False, NoticeSeverity.ERROR),
])
async def test_state_table(seeded_session, mock_provider, status, expected_status, to_return_page, notice_severity):
    mock_provider.register_payment("wp_1", REFERENCE, status)
    notices = MemoryNoticeSink()

    outcome = await _reconciler(seeded_session, mock_provider, notices).reconcile("wp_1")

    order = await seeded_session.get(Order, 1042)
    assert order.status == expected_status
    assert outcome.order_id == 1042
    assert outcome.order_status == expected_status
    assert outcome.provider_status == status

    if to_return_page:
        assert outcome.redirect_url.startswith(f"{SITE_URL}/checkout/order-received/1042/")
    else:
        assert outcome.redirect_url.startswith(f"{SITE_URL}/checkout/order-pay/1042/")

    if notice_severity is None:
        assert notices.notices == []
    else:
        assert len(notices.notices) == 1
        assert notices.notices[0].severity == notice_severity


@pytest.mark.asyncio
async def test_rejected_example(seeded_session, mock_provider, notes_of):
    """Order 1042 rejected by the bank: failed, one note, back to order-pay."""
    mock_provider.register_payment("wp_1", REFERENCE, "rejected")
    store = SqlOrderStore(seeded_session, site_url=SITE_URL)
    notices = MemoryNoticeSink()

    outcome = await WebhookReconciler(seeded_session, mock_provider, store, notices).reconcile("wp_1")

    order = await seeded_session.get(Order, 1042)
    assert order.status == "failed"
    notes = await notes_of(seeded_session, 1042)
    assert len(notes) == 1
    assert "rejected" in notes[0]
    assert "wp_1" in notes[0]
    assert outcome.redirect_url == store.checkout_payment_url(order)
    assert "rejected by your bank" in notices.notices[0].message


@pytest.mark.asyncio
async def test_completed_example(seeded_session, mock_provider, notes_of):
    mock_provider.register_payment("wp_1", REFERENCE, "completed", selected_aspsp="natwest")
    store = SqlOrderStore(seeded_session, site_url=SITE_URL)

    outcome = await WebhookReconciler(seeded_session, mock_provider, store, MemoryNoticeSink()).reconcile("wp_1")

    order = await seeded_session.get(Order, 1042)
    assert outcome.order_id == 1042
    assert order.transaction_id == REFERENCE
    assert order.paid_at is not None
    assert outcome.redirect_url == store.return_url(order)

    notes = await notes_of(seeded_session, 1042)
    assert notes[0] == "Payment Update. Wonderful Payments ID: wp_1, Status: completed"
    assert notes[1] == f"Payment Success. Order reference: {REFERENCE}, Customer Bank: natwest"


@pytest.mark.asyncio
async def test_completed_twice_is_idempotent(seeded_session, mock_provider, notes_of):
    mock_provider.register_payment("wp_1", REFERENCE, "completed")
    reconciler = _reconciler(seeded_session, mock_provider)

    first = await reconciler.reconcile("wp_1")
    order = await seeded_session.get(Order, 1042)
    paid_at = order.paid_at

    second = await reconciler.reconcile("wp_1")

    assert first.order_status == second.order_status == "processing"
    assert order.transaction_id == REFERENCE
    assert order.paid_at == paid_at
    assert len(await notes_of(seeded_session, 1042)) == 4


@pytest.mark.asyncio
async def test_failed_twice_keeps_failed(seeded_session, mock_provider):
    mock_provider.register_payment("wp_1", REFERENCE, "expired")
    notices = MemoryNoticeSink()
    reconciler = _reconciler(seeded_session, mock_provider, notices)

    first = await reconciler.reconcile("wp_1")
    outcome = await reconciler.reconcile("wp_1")

    assert outcome.order_status == "failed"
    assert outcome.redirect_url == first.redirect_url
    assert len(notices.notices) == 1


@pytest.mark.asyncio
async def test_late_failure_does_not_downgrade_paid_order(seeded_session, mock_provider, notes_of):
    mock_provider.register_payment("wp_1", REFERENCE, "completed")
    mock_provider.register_payment("wp_2", REFERENCE, "rejected")
    notices = MemoryNoticeSink()
    store = SqlOrderStore(seeded_session, site_url=SITE_URL)
    reconciler = WebhookReconciler(seeded_session, mock_provider, store, notices)

    await reconciler.reconcile("wp_1")
    outcome = await reconciler.reconcile("wp_2")

    assert outcome.order_status == "processing"
    assert notices.notices == []
    order = await seeded_session.get(Order, 1042)
    assert outcome.redirect_url == store.return_url(order)
    notes = await notes_of(seeded_session, 1042)
    assert notes[-1] == "Payment Update. Wonderful Payments ID: wp_2, Status: rejected"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["rejected", "expired", "refund_requested"])
async def test_failure_for_already_paid_order_sends_payer_to_thank_you(seeded_session, mock_provider, status):
    mock_provider.register_payment("wp_9", "WOO-ZZ99ZZ-1046", status)
    notices = MemoryNoticeSink()
    store = SqlOrderStore(seeded_session, site_url=SITE_URL)

    outcome = await WebhookReconciler(seeded_session, mock_provider, store, notices).reconcile("wp_9")

    order = await seeded_session.get(Order, 1046)
    assert order.status == "processing"
    assert notices.notices == []
    assert outcome.redirect_url == store.return_url(order)


@pytest.mark.asyncio
async def test_ignores_caller_status(seeded_session, mock_provider):
    """Status comes from the provider lookup only."""
    mock_provider.register_payment("wp_1", REFERENCE, "pending")

    outcome = await _reconciler(seeded_session, mock_provider).reconcile("wp_1")

    assert outcome.order_status == "on-hold"
    assert mock_provider.calls == [{"method": "get_payment", "wonderful_payment_id": "wp_1"}]


class TestAbort:
    @pytest.mark.asyncio
    async def test_status_fetch_failure(self, seeded_session, mock_provider, notes_of):
        mock_provider.register_payment("wp_1", REFERENCE, "completed")
        mock_provider.fail_next(ProviderError("GET /v2/woo/wp_1 returned HTTP 503", status_code=503))

        with pytest.raises(ProviderError):
            await _reconciler(seeded_session, mock_provider).reconcile("wp_1")

        order = await seeded_session.get(Order, 1042)
        assert order.status == "pending"
        assert await notes_of(seeded_session, 1042) == []

    @pytest.mark.asyncio
    async def test_unknown_payment(self, seeded_session, mock_provider):
        with pytest.raises(ProviderError):
            await _reconciler(seeded_session, mock_provider).reconcile("wp_missing")

    @pytest.mark.asyncio
    async def test_malformed_reference(self, seeded_session, mock_provider):
        mock_provider.register_payment("wp_1", "ORDER-1042", "completed")

        with pytest.raises(MalformedReferenceError):
            await _reconciler(seeded_session, mock_provider).reconcile("wp_1")

    @pytest.mark.asyncio
    async def test_order_not_found(self, seeded_session, mock_provider, notes_of):
        mock_provider.register_payment("wp_1", "WOO-AB12CD-9999", "completed")

        with pytest.raises(OrderNotFoundError):
            await _reconciler(seeded_session, mock_provider).reconcile("wp_1")

        assert await notes_of(seeded_session, 9999) == []
