# src/kvasari_stage/models/__init__.py
"""SQLAlchemy models for the Kvasari application."""

from .artwork import Artwork, ArtworkType, ImageFormat
from .feedback import Comment, Reaction, ReactionKind
from .user import Ban, Follow, User

__all__ = [
    "Artwork", "ArtworkType", "ImageFormat",
    "Comment", "Reaction", "ReactionKind",
    "User", "Follow", "Ban",
]
