"""
Order inspection endpoints.

GET /orders/{id}         : Order payment state with its note trail.
GET /orders/{id}/notices : Pending payer notices (consumed on read).
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wonderful_gateway.database import get_session
from wonderful_gateway.models.order import Order, OrderNote
from wonderful_gateway.store.sql_store import SqlOrderStore, pop_notices

router = APIRouter(prefix="/orders", tags=["orders"])


class NoteEntry(BaseModel):
    id: int
    note: str
    created_at: Optional[str]


class OrderDetail(BaseModel):
    id: int
    total: float
    currency: str
    billing_email: Optional[str]
    status: str
    transaction_id: Optional[str]
    paid_at: Optional[str]
    created_at: Optional[str]
    updated_at: Optional[str]
    notes: list[NoteEntry]


class NoticeEntry(BaseModel):
    message: str
    severity: str


def _order_to_detail(order: Order, notes: list[OrderNote]) -> OrderDetail:
    return OrderDetail(
        id=order.id,
        total=order.total,
        currency=order.currency,
        billing_email=order.billing_email,
        status=order.status,
        transaction_id=order.transaction_id,
        paid_at=order.paid_at.isoformat() if order.paid_at else None,
        created_at=order.created_at.isoformat() if order.created_at else None,
        updated_at=order.updated_at.isoformat() if order.updated_at else None,
        notes=[
            NoteEntry(
                id=n.id,
                note=n.note,
                created_at=n.created_at.isoformat() if n.created_at else None,
            )
            for n in notes
        ],
    )


async def _get_order_or_404(session: AsyncSession, order_id: str) -> Order:
    order = await SqlOrderStore(session).get_order(order_id)
    if not order:
        raise HTTPException(status_code=404, detail=f"Order not found: {order_id}")
    return order


@router.get("/{order_id}", response_model=OrderDetail)
async def get_order(order_id: str, session: AsyncSession = Depends(get_session)):
    """Order payment state plus every note, oldest first."""
    order = await _get_order_or_404(session, order_id)
    result = await session.execute(
        select(OrderNote).where(OrderNote.order_id == order.id).order_by(OrderNote.id.asc())
    )
    return _order_to_detail(order, list(result.scalars().all()))


@router.get("/{order_id}/notices", response_model=list[NoticeEntry])
async def get_notices(order_id: str, session: AsyncSession = Depends(get_session)):
    """
    Notices queued for the payer by checkout callbacks.

    Each notice is returned once; the storefront shows it on its next render.
    """
    order = await _get_order_or_404(session, order_id)
    notices = await pop_notices(session, order.id)
    await session.commit()
    return [NoticeEntry(message=n.message, severity=n.severity) for n in notices]
