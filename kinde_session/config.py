"""
Session engine configuration. Defaults for storage and token requests, overridable from env.
Storage settings read these once; the host app may mutate the settings objects afterwards.
"""
import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


# Prepended to every physical key written to a chunked backend
KEY_PREFIX = os.environ.get("KINDE_STORAGE_KEY_PREFIX", "kinde-")

# Max characters per physical entry on size-constrained backends
MAX_LENGTH = int(os.environ.get("KINDE_STORAGE_MAX_LENGTH", "2000"))

# Route the refresh token to the insecure store (when one is set)
USE_INSECURE_FOR_REFRESH_TOKEN = _env_flag("KINDE_USE_INSECURE_FOR_REFRESH_TOKEN")

# Hard ceiling of a secure-enclave style backend entry; MAX_LENGTH can only lower it
BACKEND_MAX_LENGTH = 2048

# Lazily loaded backends: poll this many times, this far apart, before giving up
BACKEND_READY_ATTEMPTS = int(os.environ.get("KINDE_BACKEND_READY_ATTEMPTS", "20"))
BACKEND_READY_INTERVAL = float(os.environ.get("KINDE_BACKEND_READY_INTERVAL", "0.1"))

# Token endpoint request timeout (seconds)
TOKEN_REQUEST_TIMEOUT = float(os.environ.get("KINDE_TOKEN_REQUEST_TIMEOUT", "10.0"))

# Always the last segment of the Kinde-SDK header
PLATFORM_TAG = "Python"

# Token endpoint path under the issuer domain
TOKEN_PATH = "/oauth2/token"
