"""
Public surface of the session engine: storage, registry, refresh timer, and the
exchange/refresh flows.
"""
from kinde_session.chunked_store import ChunkedStore, StorageBackend, StorageUnavailableError
from kinde_session.exchange import exchange_authorization_code
from kinde_session.keys import StorageKeys
from kinde_session.refresh import refresh_token
from kinde_session.refresh_timer import RefreshTimer, clear_refresh_timer, set_refresh_timer
from kinde_session.registry import (
    StorageRegistry,
    StorageSettings,
    clear_active_storage,
    clear_insecure_storage,
    default_registry,
    get_active_storage,
    get_insecure_storage,
    set_active_storage,
    set_insecure_storage,
    storage_settings,
)
from kinde_session.results import TokenResult
from kinde_session.routes import create_auth_router
from kinde_session.session_store import MemoryStorage, SessionStore
from kinde_session.token_request import framework_settings, sanitize_url
from kinde_session.tokens import get_decoded_token, get_raw_token, is_authenticated

__all__ = [
    "ChunkedStore",
    "MemoryStorage",
    "RefreshTimer",
    "SessionStore",
    "StorageBackend",
    "StorageKeys",
    "StorageRegistry",
    "StorageSettings",
    "StorageUnavailableError",
    "TokenResult",
    "clear_active_storage",
    "clear_insecure_storage",
    "clear_refresh_timer",
    "create_auth_router",
    "default_registry",
    "exchange_authorization_code",
    "framework_settings",
    "get_active_storage",
    "get_decoded_token",
    "get_insecure_storage",
    "get_raw_token",
    "is_authenticated",
    "refresh_token",
    "sanitize_url",
    "set_active_storage",
    "set_insecure_storage",
    "set_refresh_timer",
    "storage_settings",
]
