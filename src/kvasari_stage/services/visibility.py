"""Ban-aware visibility predicates shared by catalog, feedback and feed queries."""

from __future__ import annotations

from typing import Any

from sqlalchemy import ColumnElement, and_, exists, or_, select
from sqlalchemy.orm import Session

from kvasari_stage.models.artwork import Artwork
from kvasari_stage.models.user import Ban, Follow
from kvasari_stage.services.errors import ArtworkNotFoundError
from kvasari_stage.utils.hash import is_content_digest


def banned_between(requester_id: str, user_column: Any) -> ColumnElement[bool]:
    """SQL condition true when ``requester_id`` and ``user_column`` share a ban."""
    return exists().where(
        or_(
            and_(Ban.source_id == user_column, Ban.target_id == requester_id),
            and_(Ban.source_id == requester_id, Ban.target_id == user_column),
        )
    )


def visible_to(requester_id: str, user_column: Any) -> ColumnElement[bool]:
    """SQL condition true when content owned by ``user_column`` may be shown.

    A ban in either direction hides the content, so a new ban retroactively
    hides everything already published.
    """
    return ~banned_between(requester_id, user_column)


def followed_by(requester_id: str, user_column: Any) -> ColumnElement[bool]:
    """SQL condition true when ``requester_id`` follows ``user_column``."""
    return user_column.in_(
        select(Follow.target_id).where(Follow.follower_id == requester_id)
    )


def find_visible_artwork(session: Session, artwork_id: str, requester_id: str) -> Artwork:
    """Return a live artwork the requester may see.

    Raises:
        ArtworkNotFoundError: If the artwork is missing, deleted, or hidden by a ban.
    """
    if not is_content_digest(artwork_id):
        raise ArtworkNotFoundError(artwork_id)
    artwork = session.scalars(
        select(Artwork).where(
            Artwork.id == artwork_id,
            Artwork.deleted.is_(False),
            visible_to(requester_id, Artwork.author_id),
        )
    ).first()
    if artwork is None:
        raise ArtworkNotFoundError(artwork_id)
    return artwork
