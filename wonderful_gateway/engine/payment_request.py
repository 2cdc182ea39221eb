"""
Payment request builder: checkout → provider hand-off.

For one checkout attempt:

  1. Validate the payer's bank choice (no remote call if missing)
  2. Check the merchant key is configured (no remote call if missing)
  3. Generate a merchant payment reference (WOO-XXXXXX-<order>)
  4. Assemble and encrypt the payment payload
  5. Ask the provider for a `ref` for this attempt (GET /v2/ref)
  6. Compose the hosted checkout redirect URL

Nothing is persisted besides an audit entry; the provider is the source of
truth for the payment from here on.
"""

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from wonderful_gateway.audit.logger import log_event
from wonderful_gateway.config import Settings, settings as default_settings
from wonderful_gateway.engine.crypto import encrypt_payload
from wonderful_gateway.engine.errors import (
    CheckoutValidationError,
    ConfigurationError,
    PaymentInitiationError,
    ProviderError,
)
from wonderful_gateway.engine.redirect import build_redirect_url
from wonderful_gateway.engine.reference import generate_reference
from wonderful_gateway.models.order import Order
from wonderful_gateway.providers.base import PaymentProvider

logger = logging.getLogger("wonderful_gateway.checkout")

SELECT_BANK_MESSAGE = "Select your bank from the list provided"

_TAG_RE = re.compile(r"<[^>]*>")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_SPACE_RE = re.compile(r"\s+")


def sanitize_text(value: Optional[str]) -> str:
    """Strip tags and control characters and collapse whitespace in payer input."""
    if value is None:
        return ""
    value = _TAG_RE.sub("", str(value))
    value = _CONTROL_RE.sub(" ", value)
    return _SPACE_RE.sub(" ", value).strip()


def to_minor_units(total: float) -> int:
    """Convert a major-unit total to pence, rounding half away from zero."""
    return int((Decimal(str(total)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class PaymentRequestPayload:
    """Everything the provider needs to start a payment, built once per attempt."""

    amount: int  # Minor units
    client_browser_agent: str
    client_ip_address: str
    consented_at: str  # ISO 8601 with offset
    currency: str
    customer_email_address: str
    is_plain_permalink: bool
    merchant_payment_reference: str
    order_id: int
    plugin_id: str
    selected_aspsp: str
    source: str
    woo_url: str

    def to_wire(self) -> dict[str, Any]:
        # Key order is part of the wire format
        return {
            "amount": self.amount,
            "clientBrowserAgent": self.client_browser_agent,
            "clientIpAddress": self.client_ip_address,
            "consented_at": self.consented_at,
            "currency": self.currency,
            "customer_email_address": self.customer_email_address,
            "is_plain_permalink": self.is_plain_permalink,
            "merchant_payment_reference": self.merchant_payment_reference,
            "order_id": self.order_id,
            "plugin_id": self.plugin_id,
            "selected_aspsp": self.selected_aspsp,
            "source": self.source,
            "woo_url": self.woo_url,
        }

    def to_json(self) -> bytes:
        return json.dumps(self.to_wire(), separators=(",", ":")).encode("utf-8")

    def to_query(self) -> dict[str, str]:
        params = {}
        for key, value in self.to_wire().items():
            if isinstance(value, bool):
                params[key] = "1" if value else "0"
            else:
                params[key] = str(value)
        return params


def build_payload(
    order: Order,
    selected_bank: str,
    reference: str,
    config: Settings = default_settings,
    now: Optional[datetime] = None,
) -> PaymentRequestPayload:
    consented_at = (now or datetime.now(timezone.utc)).isoformat(timespec="seconds")
    return PaymentRequestPayload(
        amount=to_minor_units(order.total),
        client_browser_agent=order.customer_user_agent or "",
        client_ip_address=order.customer_ip or "",
        consented_at=consented_at,
        currency=config.currency,
        customer_email_address=order.billing_email or "",
        is_plain_permalink=config.plain_permalinks,
        merchant_payment_reference=reference,
        order_id=order.id,
        plugin_id=config.plugin_id,
        selected_aspsp=selected_bank,
        source=config.source_tag,
        woo_url=config.site_url,
    )


@dataclass(frozen=True)
class RedirectOutcome:
    """Where to send the payer to complete the payment."""

    redirect_url: str
    merchant_payment_reference: str
    ref: str


class PaymentRequestBuilder:
    """Turns an order and a bank choice into a hosted checkout redirect."""

    def __init__(
        self,
        session: AsyncSession,
        provider: PaymentProvider,
        config: Settings = default_settings,
    ):
        self._session = session
        self._provider = provider
        self._config = config

    async def build(self, order: Order, selected_bank: Optional[str]) -> RedirectOutcome:
        """
        Build the redirect for one checkout attempt.

        Raises:
            CheckoutValidationError: No bank was selected.
            ConfigurationError: The merchant key is not configured.
            PaymentInitiationError: The provider did not issue a ref.
        """
        bank = sanitize_text(selected_bank)
        if not bank:
            raise CheckoutValidationError(SELECT_BANK_MESSAGE)

        merchant_key = self._config.merchant_key.get_secret_value()
        if not merchant_key:
            logger.error("Checkout for order %s aborted: merchant key is not configured", order.id)
            raise ConfigurationError("Wonderful Payments merchant key is not configured")

        reference = generate_reference(order.number)
        payload = build_payload(order, bank, reference, config=self._config)
        encrypted = encrypt_payload(payload.to_json(), merchant_key)

        try:
            ref = await self._provider.create_reference(payload.to_query())
        except ProviderError as e:
            await log_event(self._session, "checkout_initiation_failed", order_id=order.id, details={
                "reference": reference,
                "status_code": e.status_code,
                "error": str(e),
            })
            if isinstance(e, PaymentInitiationError):
                raise
            raise PaymentInitiationError(str(e), status_code=e.status_code) from e

        redirect_url = build_redirect_url(self._config.hosted_ui_url, encrypted.token, ref)

        await log_event(self._session, "checkout_redirect_created", order_id=order.id, details={
            "reference": reference,
            "ref": ref,
            "bank": bank,
            "amount": payload.amount,
            "currency": payload.currency,
        })
        logger.info("Order %s handed off to Wonderful Payments as %s", order.id, reference)

        return RedirectOutcome(redirect_url=redirect_url, merchant_payment_reference=reference, ref=ref)
