"""Keychain persistence of the GitHub token used for API requests.

Every function degrades to a no-op (None / False) when no keychain backend
is usable, so the server still runs unauthenticated.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "GRE"
TOKEN_KEY = "github_token"

try:
    import keyring
    import keyring.errors

    _AVAILABLE = True
except ImportError:
    _AVAILABLE = False


def is_available() -> bool:
    """Return True if the OS keychain is usable."""
    return _AVAILABLE


def load(key: str = TOKEN_KEY) -> str | None:
    """Return the saved token; None when nothing usable is stored."""
    if not _AVAILABLE:
        return None
    try:
        token = keyring.get_password(SERVICE_NAME, key)
    except Exception as exc:
        # Locked or missing backends raise here; fall back to no token
        logger.warning("Keychain lookup of %s failed: %s", key, exc)
        return None
    if token is None or not token.strip():
        return None
    return token.strip()


def save(value: str, key: str = TOKEN_KEY) -> bool:
    value = value.strip() if value else ""
    if not _AVAILABLE or not value:
        return False
    try:
        keyring.set_password(SERVICE_NAME, key, value)
    except Exception as exc:
        logger.warning("Could not store %s in the keychain: %s", key, exc)
        return False
    logger.info("Stored %s in the keychain", key)
    return True


def delete(key: str = TOKEN_KEY) -> bool:
    """Remove the saved token. False if there was none or removal failed."""
    if not _AVAILABLE:
        return False
    try:
        keyring.delete_password(SERVICE_NAME, key)
    except keyring.errors.PasswordDeleteError:
        logger.debug("No %s in the keychain", key)
        return False
    except Exception as exc:
        logger.warning("Could not remove %s from the keychain: %s", key, exc)
        return False
    return True
