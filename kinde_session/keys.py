"""
Session artifacts persisted by the engine. Values double as the logical storage key.
"""
from enum import Enum


class StorageKeys(str, Enum):
    ACCESS_TOKEN = "accessToken"
    ID_TOKEN = "idToken"
    REFRESH_TOKEN = "refreshToken"
    STATE = "state"
    NONCE = "nonce"
    CODE_VERIFIER = "codeVerifier"


def key_name(key: "StorageKeys | str") -> str:
    """Logical key as plain text (enum members and custom string keys alike)."""
    return key.value if isinstance(key, StorageKeys) else str(key)
