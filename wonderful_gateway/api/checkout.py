"""
Checkout endpoints.

POST /checkout/{order_id}: Start a Wonderful Payments checkout for an order.
GET  /banks             : Banks the payer can choose from.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from wonderful_gateway.database import get_session
from wonderful_gateway.engine.errors import (
    CheckoutValidationError,
    ConfigurationError,
    PaymentInitiationError,
    ProviderError,
    ProviderUnavailableError,
)
from wonderful_gateway.engine.payment_request import PaymentRequestBuilder
from wonderful_gateway.providers import get_provider
from wonderful_gateway.providers.base import PaymentProvider
from wonderful_gateway.store.sql_store import SqlOrderStore

logger = logging.getLogger("wonderful_gateway.api.checkout")

router = APIRouter(tags=["checkout"])


class CheckoutRequest(BaseModel):
    selected_bank: Optional[str] = None


class CheckoutResponse(BaseModel):
    result: str
    redirect: Optional[str] = None
    messages: list[str] = []


class BankOut(BaseModel):
    bank_id: str
    bank_name: str
    bank_logo: Optional[str]
    status: str


def _failure(status_code: int, message: str) -> JSONResponse:
    body = CheckoutResponse(result="failure", messages=[message])
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post("/checkout/{order_id}", response_model=CheckoutResponse)
async def process_payment(
    order_id: str,
    body: CheckoutRequest,
    session: AsyncSession = Depends(get_session),
    provider: PaymentProvider = Depends(get_provider),
):
    """
    Build the hosted checkout redirect for an order.

    The selected bank comes in the request body; nothing is read from a
    session. On success the storefront sends the payer to `redirect`.
    """
    order = await SqlOrderStore(session).get_order(order_id)
    if not order:
        raise HTTPException(status_code=404, detail=f"Order not found: {order_id}")

    builder = PaymentRequestBuilder(session, provider)
    try:
        outcome = await builder.build(order, body.selected_bank)
    except CheckoutValidationError as e:
        return _failure(400, e.user_message)
    except ConfigurationError as e:
        logger.error("Checkout unavailable: %s", e)
        return _failure(503, e.user_message)
    except PaymentInitiationError as e:
        await session.commit()
        return _failure(502, e.user_message)

    await session.commit()
    return CheckoutResponse(result="success", redirect=outcome.redirect_url)


@router.get("/banks", response_model=list[BankOut])
async def list_banks(
    online_only: bool = Query(True, description="Only banks currently online"),
    provider: PaymentProvider = Depends(get_provider),
):
    """Supported banks, as data for the storefront's bank picker."""
    try:
        banks = await provider.supported_banks()
    except ConfigurationError as e:
        logger.error("Bank list unavailable: %s", e)
        raise HTTPException(status_code=503, detail=e.user_message)
    except ProviderError as e:
        status_code = 503 if isinstance(e, ProviderUnavailableError) else 502
        raise HTTPException(status_code=status_code, detail=e.user_message)

    return [
        BankOut(bank_id=b.bank_id, bank_name=b.bank_name, bank_logo=b.bank_logo, status=b.status)
        for b in banks
        if b.is_online or not online_only
    ]
