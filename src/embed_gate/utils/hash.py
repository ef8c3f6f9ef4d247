"""Hashing helpers for content fingerprints."""

from __future__ import annotations

import hashlib

FINGERPRINT_HEX_LENGTH = 64


def sha256_hexdigest(data: bytes) -> str:
    """Return the lowercase hexadecimal SHA-256 digest of the supplied data."""
    return hashlib.sha256(data).hexdigest()


def fingerprint(normalized: str) -> str:
    """Return the fingerprint of already-normalized text."""
    return sha256_hexdigest(normalized.encode("utf-8"))
