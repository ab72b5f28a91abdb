# src/kvasari_stage/utils/rows.py
"""Helpers for turning query rows into API schemas."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def convert_rows(rows: Iterable[Any], convert: Callable[[Any], T], *, kind: str) -> list[T]:
    """Convert every row, skipping (and logging) the ones that fail.

    A single malformed row never costs the caller the rest of the page.
    """
    converted: list[T] = []
    for row in rows:
        try:
            converted.append(convert(row))
        except (ValueError, TypeError, LookupError, AttributeError) as exc:
            logger.warning(
                "skipping %s %s: %s", kind, getattr(row, "id", "<unknown>"), exc, exc_info=True
            )
    return converted
