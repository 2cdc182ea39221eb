"""
Abstract payment provider interface.

The live implementation talks to the Wonderful Payments API over HTTPS; the
mock one serves development and tests. Implementations make each remote call
exactly once and raise instead of retrying, so a reference is never created
twice for one checkout attempt.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from wonderful_gateway.models.enums import BankStatus


@dataclass(frozen=True)
class ProviderPayment:
    """Authoritative payment state returned by GET /v2/woo/{id}."""

    payment_reference: str  # Merchant payment reference, WOO-XXXXXX-<order>
    wonderful_payments_id: str
    status: str  # Raw provider status, may be a value we do not know yet
    selected_aspsp: Optional[str] = None


@dataclass(frozen=True)
class Bank:
    """A bank the payer can choose at checkout."""

    bank_id: str
    bank_name: str
    bank_logo: Optional[str]
    status: str  # "online", "issues", "offline"

    @property
    def is_online(self) -> bool:
        return self.status == BankStatus.ONLINE.value


class PaymentProvider(ABC):
    """Abstract base class for payment providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier (e.g. 'wonderful')."""
        ...

    @abstractmethod
    async def create_reference(self, params: dict[str, str]) -> str:
        """
        Register a checkout attempt and return the provider's opaque `ref`.

        Raises:
            ConfigurationError: If no merchant credential is configured.
            PaymentInitiationError: On any transport or response failure.
        """
        ...

    @abstractmethod
    async def get_payment(self, wonderful_payment_id: str) -> ProviderPayment:
        """
        Fetch the authoritative status of a payment.

        Raises:
            ConfigurationError: If no merchant credential is configured.
            ProviderError: On any transport or response failure.
        """
        ...

    @abstractmethod
    async def supported_banks(self) -> list[Bank]:
        """
        List the banks the merchant can accept payments from.

        Raises:
            ProviderUnavailableError: If the provider cannot be reached.
            ProviderError: On a non-200 or malformed response.
        """
        ...
