"""Salted PBKDF2 password hashes stored as ``algo$rounds$salt$digest``."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import os

HASH_SCHEME = "pbkdf2_sha256"
PBKDF2_ROUNDS = 120_000
_SALT_BYTES = 16


def _encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _decode(value: str) -> bytes:
    return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))


def _derive(password: str, salt: bytes, rounds: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)


def _parse(stored_hash: str) -> tuple[int, bytes, bytes] | None:
    """Split a stored hash into rounds, salt and digest; ``None`` if foreign."""
    parts = (stored_hash or "").split("$")
    if len(parts) != 4 or parts[0] != HASH_SCHEME:
        return None
    try:
        return int(parts[1]), _decode(parts[2]), _decode(parts[3])
    except (ValueError, binascii.Error):
        return None


def hash_password(password: str) -> str:
    salt = os.urandom(_SALT_BYTES)
    digest = _derive(password, salt, PBKDF2_ROUNDS)
    return f"{HASH_SCHEME}${PBKDF2_ROUNDS}${_encode(salt)}${_encode(digest)}"


def verify_password(password: str, stored_hash: str) -> bool:
    """Constant-time comparison against a stored hash."""
    parsed = _parse(stored_hash)
    if parsed is None:
        return False
    rounds, salt, expected = parsed
    return hmac.compare_digest(_derive(password, salt, rounds), expected)

