# tests/factories.py
"""Payload and clock helpers shared by the service and HTTP tests."""
from __future__ import annotations

import io
import os
from datetime import UTC, datetime, timedelta
from itertools import count

from kvasari_stage.core.security import create_access_token
from kvasari_stage.models import User

_IMAGE_COUNTER = count(1)
BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


def png_bytes(size: int = 2048) -> bytes:
    """Return a distinct payload carrying the PNG signature."""
    marker = f"kvasari-{next(_IMAGE_COUNTER)}".encode()
    body = marker + os.urandom(max(0, size - 8 - len(marker)))
    return b"\x89PNG\r\n\x1a\n" + body


def jpeg_bytes(size: int = 2048) -> bytes:
    return b"\xff\xd8\xff\xe0" + os.urandom(max(0, size - 4))


def webp_bytes(size: int = 2048) -> bytes:
    payload = b"WEBPVP8 " + os.urandom(max(0, size - 16))
    return b"RIFF" + len(payload).to_bytes(4, "little") + payload


def as_stream(data: bytes) -> io.BytesIO:
    return io.BytesIO(data)


def at(minutes: int) -> datetime:
    """Return a fixed instant ``minutes`` after the test epoch."""
    return BASE_TIME + timedelta(minutes=minutes)


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
