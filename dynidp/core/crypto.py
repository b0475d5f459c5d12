"""Symmetric encryption for provider secrets and the external-login round-trip state.

Uses Fernet (AES-128-CBC + HMAC-SHA256) with a key derived from `settings.secret_key`
via SHA-256 → base64-urlsafe, so any process sharing SECRET_KEY can decrypt.
"""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet

from dynidp.core.config import get_settings


def _get_fernet() -> Fernet:
    """Derive a Fernet instance from the application secret key."""
    raw = get_settings().secret_key.encode()
    digest = hashlib.sha256(raw).digest()
    key = base64.urlsafe_b64encode(digest)
    return Fernet(key)


def encrypt(value: str) -> str:
    """Encrypt *value* and return the ciphertext as a UTF-8 string."""
    return _get_fernet().encrypt(value.encode()).decode()


def decrypt(ciphertext: str, ttl: int | None = None) -> str:
    """Decrypt *ciphertext*; with *ttl*, tokens older than *ttl* seconds are rejected.

    Raises cryptography.fernet.InvalidToken on tampering or expiry.
    """
    return _get_fernet().decrypt(ciphertext.encode(), ttl=ttl).decode()
