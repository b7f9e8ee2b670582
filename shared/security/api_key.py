"""
Key that internal callers (the payment endpoints) must present in the
X-Internal-API-Key header. Local development without a .env file gets an
insecure default and a warning.
"""
import secrets
import warnings

from shared.config.settings import INTERNAL_API_KEY as _CONFIGURED_KEY

if not _CONFIGURED_KEY:
    warnings.warn(
        "INTERNAL_API_KEY is not set. Using an insecure default. "
        "Set this env var in production!",
        stacklevel=2,
    )

INTERNAL_API_KEY: str = _CONFIGURED_KEY or "insecure-default-change-me"


def verify_api_key(provided_key: str) -> bool:
    """Constant-time comparison against the configured key."""
    if not provided_key:
        return False
    return secrets.compare_digest(str(provided_key), INTERNAL_API_KEY)
