"""Redirect URL into the provider's hosted checkout."""

from urllib.parse import urlencode

REDIRECT_PATH = "/woo-redirect"


def build_redirect_url(base_url: str, encrypted_payload: str, ref: str) -> str:
    """
    Compose {base}/woo-redirect?payload=...&ref=...

    Both values are percent-encoded, so base64 "+", "/" and "=" survive the
    trip through the payer's browser.
    """
    query = urlencode({"payload": encrypted_payload, "ref": ref})
    return f"{base_url.rstrip('/')}{REDIRECT_PATH}?{query}"
