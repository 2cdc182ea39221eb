"""
Error taxonomy for checkout and webhook processing.

Each error carries two messages: the technical one (str(exc)) that goes to
the operator log, and a `user_message` that is safe to show to the payer.
Provider calls are never retried here; callers decide what to do with a
failure.
"""

GENERIC_USER_MESSAGE = "An unexpected error occurred while processing your payment."
CONNECT_USER_MESSAGE = (
    "Unable to connect to Wonderful Payments, please try again or select another payment method."
)
INITIATE_USER_MESSAGE = (
    "Unable to initiate Wonderful Payments checkout, please try again or select another payment method."
)


class GatewayError(Exception):
    """Base exception for all gateway errors."""

    user_message = GENERIC_USER_MESSAGE

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        if user_message is not None:
            self.user_message = user_message


class CheckoutValidationError(GatewayError):
    """Missing or invalid payer/callback input. No remote call was made."""

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message, user_message=user_message or message)


class ConfigurationError(GatewayError):
    """The merchant credential (or other required setting) is missing."""


class ProviderError(GatewayError):
    """Transport failure, non-2xx response or malformed body from the provider."""

    user_message = INITIATE_USER_MESSAGE

    def __init__(self, message: str, status_code: int | None = None, user_message: str | None = None):
        super().__init__(message, user_message=user_message)
        self.status_code = status_code


class ProviderUnavailableError(ProviderError):
    """The provider could not be reached at all (DNS, TLS, timeout)."""

    user_message = CONNECT_USER_MESSAGE


class PaymentInitiationError(ProviderError):
    """Checkout could not obtain a provider reference. The payer may retry."""


class CorrelationError(GatewayError):
    """A provider callback could not be tied to a local order."""


class MalformedReferenceError(CorrelationError):
    """Merchant payment reference does not have the WOO-XXXXXX-<order> shape."""


class OrderNotFoundError(CorrelationError):
    """The order embedded in a reference does not exist."""

    def __init__(self, order_id: str):
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id
