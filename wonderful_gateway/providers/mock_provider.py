"""
Mock Wonderful Payments provider for development and tests.

Simulates the provider's behaviour without network calls:
  - Configurable latency (default 100ms)
  - Every reference created is remembered as a payment with a configurable status
  - Payments can be registered or re-statused directly for webhook scenarios
  - A one-shot failure can be armed to exercise error paths

Select it with WONDERFUL_PROVIDER=mock.
"""

import asyncio
import uuid
from typing import Optional

from wonderful_gateway.config import settings
from wonderful_gateway.engine.errors import PaymentInitiationError, ProviderError
from wonderful_gateway.models.enums import BankStatus
from wonderful_gateway.providers.base import Bank, PaymentProvider, ProviderPayment

DEFAULT_BANKS = [
    Bank("natwest", "NatWest", "https://wonderful-one.test/logos/natwest.png", BankStatus.ONLINE.value),
    Bank("barclays", "Barclays", "https://wonderful-one.test/logos/barclays.png", BankStatus.ONLINE.value),
    Bank("monzo", "Monzo", "https://wonderful-one.test/logos/monzo.png", BankStatus.ISSUES.value),
    Bank("halifax", "Halifax", "https://wonderful-one.test/logos/halifax.png", BankStatus.OFFLINE.value),
]


class MockPaymentProvider(PaymentProvider):
    """In-memory stand-in for the Wonderful Payments API."""

    def __init__(
        self,
        status: Optional[str] = None,
        latency_ms: Optional[int] = None,
        banks: Optional[list[Bank]] = None,
    ):
        self._status = status if status is not None else settings.mock_status
        self._latency_ms = latency_ms if latency_ms is not None else settings.mock_latency_ms
        self._banks = list(banks) if banks is not None else list(DEFAULT_BANKS)
        self._payments: dict[str, ProviderPayment] = {}
        self._fail_next: Optional[ProviderError] = None
        self.calls: list[dict] = []

    @property
    def name(self) -> str:
        return "mock_provider"

    def fail_next(self, error: ProviderError) -> None:
        """Make the next provider call raise `error`."""
        self._fail_next = error

    def register_payment(
        self,
        wonderful_payment_id: str,
        payment_reference: str,
        status: str,
        selected_aspsp: Optional[str] = "natwest",
    ) -> ProviderPayment:
        payment = ProviderPayment(
            payment_reference=payment_reference,
            wonderful_payments_id=wonderful_payment_id,
            status=status,
            selected_aspsp=selected_aspsp,
        )
        self._payments[wonderful_payment_id] = payment
        return payment

    async def _simulate(self, method: str, **details) -> None:
        self.calls.append({"method": method, **details})
        if self._latency_ms > 0:
            await asyncio.sleep(self._latency_ms / 1000)
        if self._fail_next is not None:
            error, self._fail_next = self._fail_next, None
            raise error

    async def create_reference(self, params: dict[str, str]) -> str:
        try:
            await self._simulate("create_reference", params=dict(params))
        except ProviderError as e:
            raise PaymentInitiationError(str(e), status_code=e.status_code) from e

        ref = f"ref_{uuid.uuid4().hex[:16]}"
        self.register_payment(
            f"wp_{uuid.uuid4().hex[:12]}",
            params["merchant_payment_reference"],
            self._status,
            params.get("selected_aspsp"),
        )
        return ref

    async def get_payment(self, wonderful_payment_id: str) -> ProviderPayment:
        await self._simulate("get_payment", wonderful_payment_id=wonderful_payment_id)
        payment = self._payments.get(wonderful_payment_id)
        if payment is None:
            raise ProviderError(f"Unknown payment: {wonderful_payment_id}", status_code=404)
        return payment

    async def supported_banks(self) -> list[Bank]:
        await self._simulate("supported_banks")
        return list(self._banks)
