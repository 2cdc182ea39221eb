"""
Payload encryption for the hosted checkout hand-off.

The provider decrypts the payload with the same merchant credential, using
OpenSSL's aes-256-cbc. To stay byte-compatible with that decoder:

  - the credential's UTF-8 bytes are the key, NUL-padded or truncated to 32 bytes
  - the ciphertext is carried as its base64 text (OpenSSL's default output)
  - transport token = base64(ciphertext_text + b"::" + raw_iv)

A fresh 16-byte IV is drawn from os.urandom for every call, so encrypting the
same payload twice never yields the same token.
"""

import base64
import os
from dataclasses import dataclass

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from wonderful_gateway.engine.errors import ConfigurationError

KEY_SIZE = 32
IV_SIZE = 16
SEPARATOR = b"::"


@dataclass(frozen=True)
class EncryptedPayload:
    """Ciphertext (as OpenSSL base64 text) plus the IV it was produced with."""

    ciphertext: bytes
    iv: bytes

    @property
    def token(self) -> str:
        return base64.b64encode(self.ciphertext + SEPARATOR + self.iv).decode("ascii")

    def __repr__(self) -> str:
        return f"EncryptedPayload(ciphertext=<{len(self.ciphertext)} bytes>, iv=<{len(self.iv)} bytes>)"


def derive_key(secret: str) -> bytes:
    """Turn the merchant credential into a 256-bit AES key."""
    if not secret:
        raise ConfigurationError("Merchant key is not configured; refusing to encrypt")
    raw = secret.encode("utf-8")
    return raw[:KEY_SIZE].ljust(KEY_SIZE, b"\x00")


def encrypt_payload(plaintext: bytes, secret: str) -> EncryptedPayload:
    """
    Encrypt a serialized payment payload with the merchant credential.

    Raises:
        ConfigurationError: If the credential is empty.
    """
    key = derive_key(secret)
    iv = os.urandom(IV_SIZE)

    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    raw = encryptor.update(padded) + encryptor.finalize()

    return EncryptedPayload(ciphertext=base64.b64encode(raw), iv=iv)
