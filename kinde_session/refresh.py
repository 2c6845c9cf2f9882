"""
Refresh-token rotation. Reads the refresh token from the store the registry resolves
(active, or insecure when configured), calls the token endpoint with the refresh_token
grant, persists the new tokens and, when the server sends expires_in, re-arms the refresh
timer with this same flow. Manual and timer-driven refreshes share this single path.
"""
import inspect
import logging
from functools import partial
from typing import Any, Callable

import httpx

from kinde_session.keys import StorageKeys
from kinde_session.refresh_timer import RefreshTimer, default_timer
from kinde_session.registry import StorageRegistry, default_registry
from kinde_session.results import TokenResult
from kinde_session.token_request import post_token_request, token_payload

logger = logging.getLogger(__name__)

OnRefresh = Callable[[TokenResult], Any]


def schedule_refresh(
    expires_in: Any,
    *,
    domain: str,
    client_id: str,
    on_refresh: OnRefresh | None = None,
    registry: StorageRegistry | None = None,
    timer: RefreshTimer | None = None,
) -> bool:
    """
    Arm the timer to run refresh_token after expires_in seconds. Returns False (nothing armed)
    when expires_in is missing or not a positive number.
    """
    if isinstance(expires_in, bool) or not isinstance(expires_in, (int, float)) or expires_in <= 0:
        return False
    timer = timer if timer is not None else default_timer
    timer.arm(
        expires_in,
        partial(
            refresh_token,
            domain=domain,
            client_id=client_id,
            on_refresh=on_refresh,
            registry=registry,
            timer=timer,
        ),
    )
    return True


async def refresh_token(
    domain: str,
    client_id: str,
    on_refresh: OnRefresh | None = None,
    registry: StorageRegistry | None = None,
    timer: RefreshTimer | None = None,
) -> TokenResult:
    """Rotate tokens using the stored refresh token. Never raises; failures come back as TokenResult."""
    if not domain:
        return _failed("Domain is required for token refresh")
    if not client_id:
        return _failed("Client ID is required for token refresh")
    try:
        return await _refresh(domain, client_id, on_refresh, registry, timer)
    except Exception as e:
        return _failed(f"Failed to refresh token: {e}")


async def _refresh(
    domain: str,
    client_id: str,
    on_refresh: OnRefresh | None,
    registry: StorageRegistry | None,
    timer: RefreshTimer | None,
) -> TokenResult:
    registry = registry if registry is not None else default_registry

    # Access and ID tokens always land in the active store, even if the refresh token does not
    if registry.get_active() is None:
        return _failed("No active storage found")
    store = registry.resolve_store_for(StorageKeys.REFRESH_TOKEN)
    if store is None:
        return _failed("No active storage found")
    stored_refresh_token = await store.get_session_item(StorageKeys.REFRESH_TOKEN)
    if not stored_refresh_token:
        return _failed("No refresh token found")

    try:
        response = await post_token_request(
            domain,
            {
                "grant_type": "refresh_token",
                "refresh_token": stored_refresh_token,
                "client_id": client_id,
            },
        )
    except httpx.HTTPError as e:
        return _failed(f"Failed to refresh token: {e}")

    if not response.is_success:
        logger.debug("Refresh rejected: status %s", response.status_code)
        return _failed("Failed to refresh token")

    data = token_payload(response)
    if not data.get("access_token"):
        return _failed("No access token received")

    result = TokenResult.from_payload(data)
    await registry.persist(
        {
            StorageKeys.ACCESS_TOKEN: result.access_token,
            StorageKeys.ID_TOKEN: result.id_token,
            StorageKeys.REFRESH_TOKEN: result.refresh_token,
        }
    )
    logger.info("Token refreshed for client_id=%s at %s", client_id, domain)

    schedule_refresh(
        data.get("expires_in"),
        domain=domain,
        client_id=client_id,
        on_refresh=on_refresh,
        registry=registry,
        timer=timer,
    )

    if on_refresh is not None:
        # Host callback errors do not undo a refresh that already succeeded
        try:
            outcome = on_refresh(result)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.exception("on_refresh callback failed")
    return result


def _failed(error: str) -> TokenResult:
    logger.warning("Token refresh failed: %s", error)
    return TokenResult.failure(error)
