"""Payment provider factory.

Provides get_provider() / set_provider() to swap implementations:
- WonderfulPaymentsProvider for production (WONDERFUL_PROVIDER=live)
- MockPaymentProvider for development and testing (WONDERFUL_PROVIDER=mock)

One instance is shared per process so the supported-banks cache is reused.
"""

from wonderful_gateway.config import settings
from wonderful_gateway.providers.base import PaymentProvider
from wonderful_gateway.providers.mock_provider import MockPaymentProvider
from wonderful_gateway.providers.wonderful import WonderfulPaymentsProvider

_current_provider: PaymentProvider | None = None


def get_provider() -> PaymentProvider:
    """Return the active payment provider, creating it from settings on first use."""
    global _current_provider
    if _current_provider is None:
        if settings.provider == "mock":
            _current_provider = MockPaymentProvider()
        else:
            _current_provider = WonderfulPaymentsProvider()
    return _current_provider


def set_provider(provider: PaymentProvider) -> None:
    """Override the active payment provider (useful for tests)."""
    global _current_provider
    _current_provider = provider


def reset_provider() -> None:
    """Reset to the settings-selected provider."""
    global _current_provider
    _current_provider = None
