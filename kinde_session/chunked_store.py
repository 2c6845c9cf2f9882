"""
Chunked session store for backends with a per-entry size ceiling (secure enclaves,
extension storage). Values are split into fixed-size chunks stored under
{key_prefix}{key}{index} and joined back on read.

Backends that load lazily are passed as a loader; the first operation waits for it with
a bounded poll. If it never becomes ready the store is unusable and every call raises
StorageUnavailableError.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from kinde_session.config import BACKEND_MAX_LENGTH, BACKEND_READY_ATTEMPTS, BACKEND_READY_INTERVAL
from kinde_session.keys import StorageKeys, key_name
from kinde_session.registry import StorageSettings, storage_settings
from kinde_session.session_store import SessionStore

logger = logging.getLogger(__name__)


class StorageUnavailableError(RuntimeError):
    """The storage backend failed to load or did not become ready in time."""


class StorageBackend(ABC):
    """Primitive native key-value calls. Keys are physical (prefixed, chunk-indexed)."""

    @abstractmethod
    async def get_item(self, key: str) -> str | None: ...

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None: ...

    @abstractmethod
    async def delete_item(self, key: str) -> None: ...


def split_string(value: str, length: int) -> list[str]:
    """Consecutive pieces of at most length characters; empty string gives no pieces."""
    if length <= 0:
        raise ValueError("Chunk length must be positive")
    return [value[i : i + length] for i in range(0, len(value), length)]


class ChunkedStore(SessionStore):
    def __init__(
        self,
        backend: StorageBackend | None = None,
        *,
        loader: Callable[[], Awaitable[StorageBackend]] | None = None,
        settings: StorageSettings | None = None,
        backend_max_length: int = BACKEND_MAX_LENGTH,
        ready_attempts: int = BACKEND_READY_ATTEMPTS,
        ready_interval: float = BACKEND_READY_INTERVAL,
    ) -> None:
        if (backend is None) == (loader is None):
            raise ValueError("Provide exactly one of backend or loader")
        self._backend = backend
        self._loader = loader
        self._load_task: asyncio.Future | None = None
        self._unavailable = False
        # Explicit settings win; otherwise the settings of the registry this store is set on,
        # falling back to the default registry. Read live so runtime changes apply on the next call
        self._settings = settings
        self._registry_settings: StorageSettings | None = None
        self.backend_max_length = backend_max_length
        self.ready_attempts = ready_attempts
        self.ready_interval = ready_interval

    @property
    def settings(self) -> StorageSettings:
        if self._settings is not None:
            return self._settings
        if self._registry_settings is not None:
            return self._registry_settings
        return storage_settings

    def bind_settings(self, settings: StorageSettings) -> None:
        self._registry_settings = settings

    @property
    def chunk_length(self) -> int:
        return min(self.settings.max_length, self.backend_max_length)

    def _chunk_key(self, key: StorageKeys | str, index: int) -> str:
        return f"{self.settings.key_prefix}{key_name(key)}{index}"

    async def _ready_backend(self) -> StorageBackend:
        if self._backend is not None:
            return self._backend
        if self._unavailable:
            raise StorageUnavailableError("Storage backend is not available")

        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._loader())
        for _ in range(self.ready_attempts):
            if self._load_task.done():
                break
            await asyncio.sleep(self.ready_interval)

        task = self._load_task
        if not task.done():
            self._unavailable = True
            task.cancel()
            logger.error(
                "Storage backend not ready after %d attempts (%.2fs interval)",
                self.ready_attempts,
                self.ready_interval,
            )
            raise StorageUnavailableError("Storage backend did not become ready in time")

        error = None if task.cancelled() else task.exception()
        if task.cancelled() or error is not None:
            self._unavailable = True
            logger.error("Error loading storage backend: %s", error)
            raise StorageUnavailableError("Storage backend failed to load") from error

        backend = task.result()
        if backend is None:
            self._unavailable = True
            logger.error("Storage backend loader returned no backend")
            raise StorageUnavailableError("Storage backend failed to load")
        self._backend = backend
        return self._backend

    async def get_session_item(self, key: StorageKeys | str) -> str | None:
        backend = await self._ready_backend()
        chunks = []
        index = 0
        chunk = await backend.get_item(self._chunk_key(key, index))
        while chunk:
            chunks.append(chunk)
            index += 1
            chunk = await backend.get_item(self._chunk_key(key, index))
        # Empty and absent are indistinguishable on these backends; both read as None
        return "".join(chunks) or None

    async def set_session_item(self, key: StorageKeys | str, value: Any) -> None:
        if not isinstance(value, str):
            raise TypeError("Item value must be a string")
        backend = await self._ready_backend()
        await self.remove_session_item(key)
        pieces = split_string(value, self.chunk_length)
        for index, piece in enumerate(pieces):
            await backend.set_item(self._chunk_key(key, index), piece)
        logger.debug("Stored %s in %d chunk(s)", key_name(key), len(pieces))

    async def remove_session_item(self, key: StorageKeys | str) -> None:
        backend = await self._ready_backend()
        index = 0
        while await backend.get_item(self._chunk_key(key, index)):
            await backend.delete_item(self._chunk_key(key, index))
            index += 1

    async def destroy_session(self) -> None:
        for key in StorageKeys:
            await self.remove_session_item(key)
