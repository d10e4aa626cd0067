"""API key authentication for the mutating keys endpoints."""

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from shared.config import settings
from shared.security import API_KEY_PREFIX, verify_api_key

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def require_api_key(api_key: str | None = Depends(api_key_header)) -> None:
    """
    Authenticate the caller via the X-API-Key header.

    - Verify format: ntk_<base64url>
    - Verify against ADMIN_API_KEY_HASH with Argon2id
    - Raise 401 UNAUTHORIZED otherwise; with no hash configured every key
      is rejected

    Log: DEBUG auth_attempt {result: success|failure}
    """
    if not api_key:
        logger.debug("auth_attempt", extra={"result": "failure", "reason": "missing_key"})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
        )

    if not api_key.startswith(API_KEY_PREFIX):
        logger.debug("auth_attempt", extra={"result": "failure", "reason": "invalid_format"})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key format",
        )

    api_key_hash = settings.ADMIN_API_KEY_HASH
    if not api_key_hash:
        logger.warning("auth_attempt", extra={"result": "failure", "reason": "not_configured"})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )

    if not verify_api_key(api_key, api_key_hash):
        logger.debug("auth_attempt", extra={"result": "failure", "reason": "invalid_key"})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )

    logger.debug("auth_attempt", extra={"result": "success"})
