"""Tests for API key authentication."""

from unittest.mock import patch

import pytest
from fastapi import HTTPException

from notary.api.auth import require_api_key
from shared.config import settings


class TestRequireApiKey:
    """Tests for the require_api_key dependency."""

    def test_missing_api_key_raises_401(self):
        with pytest.raises(HTTPException) as exc_info:
            require_api_key(api_key=None)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Missing API key"

    def test_invalid_format_raises_401(self):
        with pytest.raises(HTTPException) as exc_info:
            require_api_key(api_key="idp_not_ours")

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid API key format"

    def test_unconfigured_hash_rejects_every_key(self):
        """Test that no key is accepted when no hash is configured."""
        with patch.object(settings, "ADMIN_API_KEY_HASH", None):
            with pytest.raises(HTTPException) as exc_info:
                require_api_key(api_key="ntk_anything")

        assert exc_info.value.status_code == 401

    def test_wrong_key_raises_401(self):
        with (
            patch.object(settings, "ADMIN_API_KEY_HASH", "$argon2id$stored"),
            patch("notary.api.auth.verify_api_key", return_value=False) as mock_verify,
        ):
            with pytest.raises(HTTPException) as exc_info:
                require_api_key(api_key="ntk_wrong")

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid API key"
        mock_verify.assert_called_once_with("ntk_wrong", "$argon2id$stored")

    def test_valid_key_passes(self):
        with (
            patch.object(settings, "ADMIN_API_KEY_HASH", "$argon2id$stored"),
            patch("notary.api.auth.verify_api_key", return_value=True),
        ):
            assert require_api_key(api_key="ntk_valid") is None
