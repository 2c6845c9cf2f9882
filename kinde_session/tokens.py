"""
Reading stored tokens: raw string, unverified JWT claims, and an expiry-based
authentication check. Signatures are not verified here; that is the resource server's job.
"""
import logging
import time
from typing import Literal

import jwt

from kinde_session.keys import StorageKeys
from kinde_session.refresh import refresh_token
from kinde_session.registry import StorageRegistry, default_registry

logger = logging.getLogger(__name__)

TokenType = Literal["accessToken", "idToken"]


async def get_raw_token(
    token_type: TokenType = "accessToken",
    registry: StorageRegistry | None = None,
) -> str | None:
    registry = registry if registry is not None else default_registry
    store = registry.get_active()
    if store is None:
        return None
    key = StorageKeys.ID_TOKEN if token_type == "idToken" else StorageKeys.ACCESS_TOKEN
    token = await store.get_session_item(key)
    return token or None


async def get_decoded_token(
    token_type: TokenType = "accessToken",
    registry: StorageRegistry | None = None,
) -> dict | None:
    """Claims of the stored token, or None if absent or not a decodable JWT."""
    token = await get_raw_token(token_type, registry)
    if not token:
        return None
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        logger.debug("Stored %s is not a decodable JWT: %s", token_type, e)
        return None


async def is_authenticated(
    use_refresh_token: bool = False,
    domain: str | None = None,
    client_id: str | None = None,
    registry: StorageRegistry | None = None,
) -> bool:
    """
    True if the stored access token has not expired. With use_refresh_token, an expired
    token triggers a refresh and the refresh outcome decides. Any error means False.
    """
    try:
        claims = await get_decoded_token("accessToken", registry)
        if not claims:
            return False
        exp = claims.get("exp")
        if not exp:
            logger.error("Token does not have an expiry")
            return False

        expired = exp < int(time.time())
        if expired and use_refresh_token:
            result = await refresh_token(domain or "", client_id or "", registry=registry)
            return result.success
        return not expired
    except Exception as e:
        logger.error("Error checking authentication: %s", e)
        return False
