"""
Authorization-code exchange for the redirect back from the issuer.
Validates state against the stored anti-forgery value, exchanges code + PKCE verifier for
tokens, persists them, clears the one-time state/verifier, and optionally arms the refresh timer.
"""
import logging
from typing import Mapping
from urllib.parse import parse_qs

import httpx

from kinde_session.keys import StorageKeys
from kinde_session.refresh import OnRefresh, schedule_refresh
from kinde_session.refresh_timer import RefreshTimer
from kinde_session.registry import StorageRegistry, default_registry
from kinde_session.results import TokenResult
from kinde_session.token_request import post_token_request, token_payload

logger = logging.getLogger(__name__)


def _parse_params(url_params: Mapping[str, str] | str) -> Mapping[str, str]:
    """Accept a mapping (dict, QueryParams) or a raw query string."""
    if isinstance(url_params, str):
        parsed = parse_qs(url_params.lstrip("?"), keep_blank_values=False)
        return {k: v[0] for k, v in parsed.items() if v}
    return url_params


async def exchange_authorization_code(
    url_params: Mapping[str, str] | str,
    domain: str,
    client_id: str,
    redirect_url: str,
    auto_refresh: bool = False,
    on_refresh: OnRefresh | None = None,
    registry: StorageRegistry | None = None,
    timer: RefreshTimer | None = None,
) -> TokenResult:
    """
    Exchange the authorization code from the redirect for tokens.
    Returns TokenResult; never raises.
    """
    registry = registry if registry is not None else default_registry
    try:
        return await _exchange(
            _parse_params(url_params),
            domain,
            client_id,
            redirect_url,
            auto_refresh,
            on_refresh,
            registry,
            timer,
        )
    except Exception as e:
        return _failed(f"Token exchange failed: {e}")


async def _exchange(
    params: Mapping[str, str],
    domain: str,
    client_id: str,
    redirect_url: str,
    auto_refresh: bool,
    on_refresh: OnRefresh | None,
    registry: StorageRegistry,
    timer: RefreshTimer | None,
) -> TokenResult:
    state = params.get("state")
    code = params.get("code")
    if not state or not code:
        return _failed("Invalid state or code")

    store = registry.get_active()
    if store is None:
        return _failed("Authentication storage is not initialized")

    stored_state = await store.get_session_item(StorageKeys.STATE)
    if state != stored_state:
        return _failed(f"Invalid state; supplied {state}, expected {stored_state}")

    code_verifier = await store.get_session_item(StorageKeys.CODE_VERIFIER)
    if not code_verifier:
        return _failed("Code verifier not found")

    try:
        response = await post_token_request(
            domain,
            {
                "grant_type": "authorization_code",
                "client_id": client_id,
                "code": code,
                "code_verifier": code_verifier,
                "redirect_uri": redirect_url,
            },
        )
    except httpx.HTTPError as e:
        return _failed(f"Token exchange failed: {e}")

    if not response.is_success:
        return _failed(f"Token exchange failed: {response.status_code} - {response.text}")

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
    # One-time values; removing them prevents replay of this redirect
    await store.remove_session_item(StorageKeys.STATE)
    await store.remove_session_item(StorageKeys.CODE_VERIFIER)
    logger.info("Authorization code exchanged for client_id=%s at %s", client_id, domain)

    if auto_refresh:
        schedule_refresh(
            data.get("expires_in"),
            domain=domain,
            client_id=client_id,
            on_refresh=on_refresh,
            registry=registry,
            timer=timer,
        )
    return result


def _failed(error: str) -> TokenResult:
    logger.warning("Authorization code exchange failed: %s", error)
    return TokenResult.failure(error)
