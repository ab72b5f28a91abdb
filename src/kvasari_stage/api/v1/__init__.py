# src/kvasari_stage/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import artworks_router, stream_router

__all__ = [
    "artworks_router",
    "stream_router",
]
