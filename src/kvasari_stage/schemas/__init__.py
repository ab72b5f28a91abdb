# src/kvasari_stage/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .artwork import (
    ArtworkDetail,
    ArtworkPreview,
    AuthorArtworksResponse,
    PublishResponse,
    StreamResponse,
    TitleUpdate,
)
from .feedback import (
    CommentCreate,
    CommentCreated,
    CommentOut,
    ReactionOut,
    ReactionSet,
    ReactionStatus,
)

__all__ = [
    "ArtworkDetail", "ArtworkPreview", "AuthorArtworksResponse",
    "PublishResponse", "StreamResponse", "TitleUpdate",
    "CommentCreate", "CommentCreated", "CommentOut",
    "ReactionOut", "ReactionSet", "ReactionStatus",
]
