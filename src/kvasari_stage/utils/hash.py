# src/kvasari_stage/utils/hash.py
"""Hashing helpers deriving artwork identities from their bytes."""

from __future__ import annotations

import hashlib
import re

# Digest length in hex characters for SHA-256.
CONTENT_DIGEST_HEX_LENGTH = 64

_HEX_DIGEST = re.compile(rf"^[0-9a-f]{{{CONTENT_DIGEST_HEX_LENGTH}}}$")


def content_hasher() -> "hashlib._Hash":
    """Return a fresh incremental hasher for artwork payloads."""
    return hashlib.sha256()


def content_hexdigest(data: bytes) -> str:
    """Return the hexadecimal content digest of ``data``."""
    return hashlib.sha256(data).hexdigest()


def is_content_digest(value: str) -> bool:
    """Report whether ``value`` looks like a lowercase hex content digest."""
    return bool(_HEX_DIGEST.match(value))
