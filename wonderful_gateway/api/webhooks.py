"""
Provider callback endpoints.

GET /wonderful_payments_gateway         : Payment status webhook; redirects the payer.
GET /wonderful_payments_gateway_pending : Best-effort "payment created" notification.

Query parameters are validated once into request models. Anything the caller
sends besides the declared fields (a `status`, say) is ignored; status always
comes from the provider.
"""

import logging
import re

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from pydantic import BaseModel, Field, ValidationError, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from wonderful_gateway.config import settings
from wonderful_gateway.database import get_session
from wonderful_gateway.engine.errors import ConfigurationError, CorrelationError, ProviderError
from wonderful_gateway.engine.payment_request import sanitize_text
from wonderful_gateway.engine.pending import PendingNotifier
from wonderful_gateway.engine.reconciler import WebhookReconciler
from wonderful_gateway.providers import get_provider
from wonderful_gateway.providers.base import PaymentProvider
from wonderful_gateway.store.base import MemoryNoticeSink
from wonderful_gateway.store.sql_store import SqlOrderStore, save_notices

logger = logging.getLogger("wonderful_gateway.api.webhooks")

router = APIRouter(tags=["webhooks"])

WEBHOOK_PATH = f"/{settings.plugin_id}"
PENDING_PATH = f"/{settings.plugin_id}_pending"

PAYMENT_ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_-]*$"


class WebhookCallback(BaseModel):
    wonderful_payment_id: str = Field(alias="wonderfulPaymentId", min_length=1, pattern=PAYMENT_ID_PATTERN)

    @field_validator("wonderful_payment_id", mode="before")
    @classmethod
    def _sanitize(cls, value):
        return sanitize_text(value)


class PendingCallback(WebhookCallback):
    order_id: str = Field(min_length=1)

    @field_validator("order_id", mode="before")
    @classmethod
    def _sanitize_order(cls, value):
        return sanitize_text(value)


def _error(status_code: int) -> PlainTextResponse:
    return PlainTextResponse("error", status_code=status_code)


@router.get(WEBHOOK_PATH)
async def payment_webhook(
    request: Request,
    session: AsyncSession = Depends(get_session),
    provider: PaymentProvider = Depends(get_provider),
):
    """
    Reconcile an order with the provider's payment status.

    Responds with a 303 to the thank-you page or back to the order-pay page.
    Lookup and correlation failures answer non-2xx so the provider retries.
    """
    logger.debug("webhook fired")
    try:
        callback = WebhookCallback.model_validate(dict(request.query_params))
    except ValidationError:
        return _error(400)

    notices = MemoryNoticeSink()
    reconciler = WebhookReconciler(session, provider, SqlOrderStore(session), notices)
    try:
        outcome = await reconciler.reconcile(callback.wonderful_payment_id)
    except ConfigurationError as e:
        logger.error("Webhook cannot be processed: %s", e)
        return _error(503)
    except ProviderError:
        await session.commit()
        return _error(502)
    except CorrelationError:
        await session.commit()
        return _error(404)

    await save_notices(session, outcome.order_id, notices.notices)
    await session.commit()
    return RedirectResponse(outcome.redirect_url, status_code=303)


@router.get(PENDING_PATH)
async def payment_pending(request: Request, session: AsyncSession = Depends(get_session)):
    """Mark an order as awaiting payment. Refused updates are logged only."""
    logger.debug("payment_pending fired")
    try:
        callback = PendingCallback.model_validate(dict(request.query_params))
    except ValidationError:
        return _error(400)

    notifier = PendingNotifier(session, SqlOrderStore(session))
    try:
        await notifier.notify(callback.wonderful_payment_id, callback.order_id)
    except CorrelationError:
        return _error(404)

    await session.commit()
    return PlainTextResponse("")
