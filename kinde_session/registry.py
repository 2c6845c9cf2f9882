"""
Storage registry: settings plus the active (secure) and optional insecure store.
All reads/writes of the refresh token go through resolve_store_for so the
secure/insecure routing lives here only.
A process-wide default_registry backs the module-level helpers; flows accept an
explicit registry for isolated use (tests, multiple sessions per process).
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from kinde_session.config import KEY_PREFIX, MAX_LENGTH, USE_INSECURE_FOR_REFRESH_TOKEN
from kinde_session.keys import StorageKeys
from kinde_session.session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class StorageSettings:
    key_prefix: str = KEY_PREFIX
    max_length: int = MAX_LENGTH
    use_insecure_for_refresh_token: bool = USE_INSECURE_FOR_REFRESH_TOKEN


@dataclass
class StorageRegistry:
    settings: StorageSettings = field(default_factory=StorageSettings)
    _active: SessionStore | None = field(default=None, repr=False)
    _insecure: SessionStore | None = field(default=None, repr=False)

    def set_active(self, store: SessionStore) -> None:
        store.bind_settings(self.settings)
        self._active = store

    def clear_active(self) -> None:
        self._active = None

    def get_active(self) -> SessionStore | None:
        return self._active

    def set_insecure(self, store: SessionStore) -> None:
        store.bind_settings(self.settings)
        self._insecure = store

    def clear_insecure(self) -> None:
        self._insecure = None

    def get_insecure(self) -> SessionStore | None:
        return self._insecure

    def resolve_store_for(self, key: StorageKeys | str) -> SessionStore | None:
        """
        Store that holds key: the insecure store for the refresh token when the setting is on
        and an insecure store is set; the active store otherwise. None if that store is unset.
        """
        if (
            key == StorageKeys.REFRESH_TOKEN
            and self.settings.use_insecure_for_refresh_token
            and self._insecure is not None
        ):
            return self._insecure
        return self._active

    async def persist(self, entries: Mapping[StorageKeys | str, Any]) -> None:
        """
        Write entries as one batch per resolved store. None values are skipped.
        Raises RuntimeError if an entry resolves to no store.
        """
        batches: dict[int, tuple[SessionStore, dict]] = {}
        for key, value in entries.items():
            if value is None:
                continue
            store = self.resolve_store_for(key)
            if store is None:
                raise RuntimeError("No active storage found")
            batches.setdefault(id(store), (store, {}))[1][key] = value
        for store, batch in batches.values():
            logger.debug("Persisting %d item(s) to %s", len(batch), type(store).__name__)
            await store.set_items(batch)


default_registry = StorageRegistry()
storage_settings = default_registry.settings


def set_active_storage(store: SessionStore) -> None:
    default_registry.set_active(store)


def clear_active_storage() -> None:
    default_registry.clear_active()


def get_active_storage() -> SessionStore | None:
    return default_registry.get_active()


def set_insecure_storage(store: SessionStore) -> None:
    default_registry.set_insecure(store)


def clear_insecure_storage() -> None:
    default_registry.clear_insecure()


def get_insecure_storage() -> SessionStore | None:
    return default_registry.get_insecure()
