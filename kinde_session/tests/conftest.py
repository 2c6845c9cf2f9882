"""
Pytest configuration for kinde_session. Clear env overrides so config defaults apply,
and reset process-wide state (default registry, timer, framework identity) between tests.
"""
import os

for _name in (
    "KINDE_STORAGE_KEY_PREFIX",
    "KINDE_STORAGE_MAX_LENGTH",
    "KINDE_USE_INSECURE_FOR_REFRESH_TOKEN",
    "KINDE_BACKEND_READY_ATTEMPTS",
    "KINDE_BACKEND_READY_INTERVAL",
):
    os.environ.pop(_name, None)

import pytest  # noqa: E402

from kinde_session.chunked_store import StorageBackend  # noqa: E402
from kinde_session.refresh_timer import default_timer  # noqa: E402
from kinde_session.registry import StorageRegistry, default_registry  # noqa: E402
from kinde_session.token_request import framework_settings  # noqa: E402


class DictBackend(StorageBackend):
    """Native backend stand-in: plain dict plus a log of written physical keys."""

    def __init__(self) -> None:
        self.items: dict[str, str] = {}
        self.written: list[str] = []

    async def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self.written.append(key)
        self.items[key] = value

    async def delete_item(self, key: str) -> None:
        self.items.pop(key, None)


@pytest.fixture
def backend() -> DictBackend:
    return DictBackend()


@pytest.fixture
def registry() -> StorageRegistry:
    return StorageRegistry()


@pytest.fixture(autouse=True)
def reset_global_state():
    yield
    default_registry.clear_active()
    default_registry.clear_insecure()
    default_registry.settings.key_prefix = "kinde-"
    default_registry.settings.max_length = 2000
    default_registry.settings.use_insecure_for_refresh_token = False
    default_timer.cancel()
    framework_settings.framework = ""
    framework_settings.framework_version = ""
    framework_settings.sdk_version = ""
