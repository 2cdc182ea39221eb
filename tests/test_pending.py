"""Tests for the pending notifier and the order store transition rules."""

import pytest

from wonderful_gateway.engine.errors import OrderNotFoundError
from wonderful_gateway.engine.pending import PendingNotifier
from wonderful_gateway.models.enums import NoticeSeverity, OrderStatus
from wonderful_gateway.models.order import Order
from wonderful_gateway.store.base import Notice
from wonderful_gateway.store.sql_store import SqlOrderStore, pop_notices, save_notices


class TestPendingNotifier:
    @pytest.mark.asyncio
    async def test_marks_pending_with_note(self, seeded_session, notes_of):
        order = await seeded_session.get(Order, 1043)
        order.status = OrderStatus.FAILED.value

        outcome = await PendingNotifier(seeded_session, SqlOrderStore(seeded_session)).notify("wp_77", "1043")

        assert outcome.updated is True
        assert order.status == "pending"
        assert await notes_of(seeded_session, 1043) == ["Payment Created - Wonderful Payments ID:wp_77"]

    @pytest.mark.asyncio
    async def test_refused_update_is_not_fatal(self, seeded_session, notes_of, caplog):
        outcome = await PendingNotifier(seeded_session, SqlOrderStore(seeded_session)).notify("wp_77", "1046")

        order = await seeded_session.get(Order, 1046)
        assert outcome.updated is False
        assert order.status == "processing"
        assert await notes_of(seeded_session, 1046) == []
        assert "Order status update failed" in caplog.text

    @pytest.mark.asyncio
    async def test_unknown_order(self, seeded_session):
        with pytest.raises(OrderNotFoundError):
            await PendingNotifier(seeded_session, SqlOrderStore(seeded_session)).notify("wp_77", "5000")


class TestSqlOrderStore:
    @pytest.mark.asyncio
    async def test_same_status_is_noop(self, seeded_session):
        store = SqlOrderStore(seeded_session)
        order = await store.get_order("1042")
        assert await store.update_status(order, OrderStatus.PENDING) is True
        assert order.status == "pending"

    @pytest.mark.asyncio
    async def test_paid_order_cannot_move(self, seeded_session):
        store = SqlOrderStore(seeded_session)
        order = await store.get_order("1046")
        assert await store.update_status(order, OrderStatus.FAILED, "late failure") is False
        assert order.status == "processing"

    @pytest.mark.asyncio
    async def test_payment_complete_once(self, seeded_session):
        store = SqlOrderStore(seeded_session)
        order = await store.get_order("1042")
        assert await store.mark_payment_complete(order, "WOO-AB12CD-1042") is True
        assert await store.mark_payment_complete(order, "WOO-ZZZZZZ-1042") is False
        assert order.transaction_id == "WOO-AB12CD-1042"

    @pytest.mark.asyncio
    async def test_failed_order_can_be_paid(self, seeded_session):
        store = SqlOrderStore(seeded_session)
        order = await store.get_order("1042")
        await store.update_status(order, OrderStatus.FAILED)
        assert await store.mark_payment_complete(order, "WOO-AB12CD-1042") is True
        assert order.status == "processing"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("order_id", ["", "abc", "1042; drop", "9999"])
    async def test_get_order_misses(self, seeded_session, order_id):
        assert await SqlOrderStore(seeded_session).get_order(order_id) is None

    @pytest.mark.asyncio
    async def test_urls_carry_order_key(self, seeded_session):
        store = SqlOrderStore(seeded_session, site_url="https://shop.example.co.uk/")
        order = await store.get_order("1042")
        assert store.return_url(order) == (
            f"https://shop.example.co.uk/checkout/order-received/1042/?key={order.order_key}"
        )
        assert store.checkout_payment_url(order) == (
            f"https://shop.example.co.uk/checkout/order-pay/1042/?pay_for_order=true&key={order.order_key}"
        )

    @pytest.mark.asyncio
    async def test_notices_are_consumed_once(self, seeded_session):
        await save_notices(seeded_session, 1042, [Notice("Your payment was cancelled.", NoticeSeverity.NOTICE)])

        first = await pop_notices(seeded_session, 1042)
        second = await pop_notices(seeded_session, 1042)

        assert [(n.message, n.severity) for n in first] == [("Your payment was cancelled.", "notice")]
        assert second == []
