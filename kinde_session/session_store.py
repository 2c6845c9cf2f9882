"""
Session store interface and the in-memory variant.
Stores hold session artifacts (tokens, state, verifier) keyed by StorageKeys.
MemoryStorage is the default for tests and server-side use; values are lost on exit.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Mapping

from kinde_session.keys import StorageKeys, key_name

if TYPE_CHECKING:
    from kinde_session.registry import StorageSettings


class SessionStore(ABC):
    """Async key-value store for one session."""

    @abstractmethod
    async def get_session_item(self, key: StorageKeys | str) -> Any | None:
        """Value for key, or None when absent."""

    @abstractmethod
    async def set_session_item(self, key: StorageKeys | str, value: Any) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    async def remove_session_item(self, key: StorageKeys | str) -> None:
        """Delete key; no-op when absent."""

    @abstractmethod
    async def destroy_session(self) -> None:
        """Remove every item of this session."""

    def bind_settings(self, settings: "StorageSettings") -> None:
        """Called when the store is set on a registry. Stores without physical keys ignore it."""

    async def set_items(self, entries: Mapping[StorageKeys | str, Any]) -> None:
        for key, value in entries.items():
            await self.set_session_item(key, value)


class MemoryStorage(SessionStore):
    def __init__(self) -> None:
        self._items: dict[str, Any] = {}

    async def get_session_item(self, key: StorageKeys | str) -> Any | None:
        return self._items.get(key_name(key))

    async def set_session_item(self, key: StorageKeys | str, value: Any) -> None:
        if value is None:
            self._items.pop(key_name(key), None)
            return
        self._items[key_name(key)] = value

    async def remove_session_item(self, key: StorageKeys | str) -> None:
        self._items.pop(key_name(key), None)

    async def destroy_session(self) -> None:
        self._items.clear()

    def __repr__(self) -> str:
        return f"MemoryStorage(keys={sorted(self._items)})"
