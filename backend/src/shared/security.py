"""API key generation and hashing for the keys API."""

import base64
import secrets

from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError

API_KEY_PREFIX = "ntk_"

# Argon2id with library defaults
_ph = PasswordHasher()


def generate_api_key() -> str:
    """
    Generate an API key: ntk_<32 random bytes as base64url>.

    Only the hash of the key (see hash_api_key) goes into ADMIN_API_KEY_HASH.
    """
    random_bytes = secrets.token_bytes(32)
    encoded = base64.urlsafe_b64encode(random_bytes).decode("ascii").rstrip("=")
    return f"{API_KEY_PREFIX}{encoded}"


def hash_api_key(api_key: str) -> str:
    return _ph.hash(api_key)


def verify_api_key(api_key: str, api_key_hash: str) -> bool:
    """Check an API key against a stored Argon2id hash."""
    try:
        _ph.verify(api_key_hash, api_key)
        return True
    except VerifyMismatchError:
        return False
