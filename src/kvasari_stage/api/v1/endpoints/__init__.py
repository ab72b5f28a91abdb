# src/kvasari_stage/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .artworks import router as artworks_router
from .stream import router as stream_router

__all__ = [
    "artworks_router",
    "stream_router",
]
