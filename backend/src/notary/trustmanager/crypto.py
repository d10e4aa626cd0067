"""At-rest protection for private key files.

Private keys are serialized as PKCS#8 PEM. When a Fernet key is configured
the PEM is encrypted before it reaches disk.
"""

import logging

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

logger = logging.getLogger(__name__)

FERNET_PREFIX = b"gAAAA"


class CryptoError(Exception):
    """Raised when a cryptographic operation fails."""

    pass


def load_encryption_key(key_str: str | None) -> bytes | None:
    """Validate an optional Fernet key string.

    Raises:
        CryptoError: If the key is set but invalid.
    """
    if not key_str:
        return None

    try:
        key_bytes = key_str.encode("utf-8")
        Fernet(key_bytes)
        return key_bytes
    except (ValueError, TypeError) as e:
        raise CryptoError(f"Invalid KEY_ENCRYPTION_KEY: {e}") from e


def private_key_to_pem(private_key: PrivateKeyTypes) -> bytes:
    """Serialize a private key as unencrypted PKCS#8 PEM."""
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def encrypt_private_key(pem: bytes, key: bytes | None) -> bytes:
    """Encrypt a private key PEM with Fernet. Returns the PEM unchanged without a key."""
    if key is None:
        return pem
    return Fernet(key).encrypt(pem)


def decrypt_private_key(data: bytes, key: bytes | None) -> bytes:
    """Reverse encrypt_private_key.

    Raises:
        CryptoError: If the data is encrypted and cannot be decrypted.
    """
    if not data.startswith(FERNET_PREFIX):
        return data
    if key is None:
        raise CryptoError("Private key is encrypted but no KEY_ENCRYPTION_KEY is configured")

    try:
        return Fernet(key).decrypt(data)
    except InvalidToken as e:
        raise CryptoError("Failed to decrypt private key: invalid token") from e


def load_private_key(data: bytes, key: bytes | None = None) -> PrivateKeyTypes:
    """Load a private key written by encrypt_private_key/private_key_to_pem."""
    pem = decrypt_private_key(data, key)
    try:
        return serialization.load_pem_private_key(pem, password=None)
    except ValueError as e:
        raise CryptoError(f"Failed to load private key: {e}") from e


def generate_fernet_key() -> str:
    """Generate a new Fernet encryption key for KEY_ENCRYPTION_KEY."""
    return Fernet.generate_key().decode("utf-8")
