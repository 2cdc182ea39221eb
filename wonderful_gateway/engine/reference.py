"""
Merchant payment references.

Format: WOO-<6 uppercase alphanumerics>-<order number>

The random segment only makes references unguessable and unique per attempt.
The order number segment is what ties a provider callback back to a local
order, so everything after the second "-" is treated as the order number.
"""

import re
import secrets
import string

from wonderful_gateway.engine.errors import MalformedReferenceError

PREFIX = "WOO"
RANDOM_LENGTH = 6
ALPHABET = string.ascii_uppercase + string.digits

_REFERENCE_RE = re.compile(rf"^{PREFIX}-[A-Z0-9]{{{RANDOM_LENGTH}}}-(?P<order>.+)$")


def generate_reference(order_number: str) -> str:
    """Create a fresh merchant payment reference for one checkout attempt."""
    order_number = str(order_number)
    if not order_number:
        raise ValueError("order_number must not be empty")
    token = "".join(secrets.choice(ALPHABET) for _ in range(RANDOM_LENGTH))
    return f"{PREFIX}-{token}-{order_number}"


def extract_order_id(reference: str | None) -> str:
    """
    Recover the order number embedded in a merchant payment reference.

    Raises:
        MalformedReferenceError: If the reference is not WOO-XXXXXX-<order>.
    """
    match = _REFERENCE_RE.match((reference or "").strip())
    if not match:
        raise MalformedReferenceError(f"Malformed merchant payment reference: {reference!r}")
    return match.group("order")
