"""Tests for API key utilities."""

from shared.security import generate_api_key, hash_api_key, verify_api_key


class TestApiKeySecurity:
    """Tests for API key generation and verification."""

    def test_generate_api_key_format(self):
        """Test that generated API keys carry the prefix and enough entropy."""
        api_key = generate_api_key()

        assert api_key.startswith("ntk_")
        # 32 bytes base64url without padding = 43 chars
        assert len(api_key) == 4 + 43

    def test_generate_api_key_unique(self):
        keys = [generate_api_key() for _ in range(50)]
        assert len(set(keys)) == 50

    def test_hash_is_salted_argon2(self):
        """Test that hashing the same key twice gives different Argon2 hashes."""
        api_key = generate_api_key()

        first, second = hash_api_key(api_key), hash_api_key(api_key)

        assert first.startswith("$argon2")
        assert first != second

    def test_verify_api_key(self):
        """Test that only the original key verifies."""
        api_key = generate_api_key()
        hashed = hash_api_key(api_key)

        assert verify_api_key(api_key, hashed) is True
        assert verify_api_key(generate_api_key(), hashed) is False
        assert verify_api_key(api_key + "x", hashed) is False
