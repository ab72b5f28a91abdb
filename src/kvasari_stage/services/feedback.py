"""Comments and reactions left on artworks."""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kvasari_stage.db.time import utcnow
from kvasari_stage.models.feedback import (
    COMMENT_MAX_LENGTH,
    COMMENT_MIN_LENGTH,
    Comment,
    Reaction,
    ReactionKind,
)
from kvasari_stage.schemas.feedback import CommentOut, ReactionOut
from kvasari_stage.services.errors import (
    CommentNotFoundError,
    InvalidCommentError,
    ReactionNotFoundError,
)
from kvasari_stage.services.visibility import find_visible_artwork, visible_to
from kvasari_stage.utils.rows import convert_rows

logger = logging.getLogger(__name__)

__all__ = ["FeedbackStore", "ReactionOutcome"]


@dataclass(frozen=True)
class ReactionOutcome:
    """Result of setting a reaction.

    ``changed`` is ``False`` when the stored reaction already matched, in which
    case ``date`` is the untouched date of the existing row.
    """

    changed: bool
    date: datetime


def _comment_out(comment: Comment) -> CommentOut:
    return CommentOut(
        id=comment.id,
        author_id=comment.user_id,
        author_alias=comment.user.alias,
        author_name=comment.user.name,
        comment=comment.body,
        date=comment.date,
    )


def _reaction_out(reaction: Reaction) -> ReactionOut:
    return ReactionOut(
        author_id=reaction.user_id,
        author_alias=reaction.user.alias,
        author_name=reaction.user.name,
        reaction=reaction.kind,
        date=reaction.date,
    )


class FeedbackStore:
    """Reads and writes comments and reactions with ban-aware visibility."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # Reactions

    def set_reaction(self, user_id: str, artwork_id: str, kind: ReactionKind) -> ReactionOutcome:
        """Create or change the user's reaction on an artwork.

        Raises:
            ArtworkNotFoundError: If the artwork isn't visible to the user.
        """
        find_visible_artwork(self.session, artwork_id, user_id)

        existing = self.session.get(Reaction, (artwork_id, user_id))
        if existing is None:
            now = utcnow()
            self.session.add(Reaction(artwork_id=artwork_id, user_id=user_id, kind=kind, date=now))
            try:
                self.session.commit()
            except IntegrityError:
                # A concurrent request inserted the pair first; settle against its row.
                self.session.rollback()
                existing = self.session.get(Reaction, (artwork_id, user_id))
                if existing is None:
                    raise
            else:
                return ReactionOutcome(changed=True, date=now)

        if existing.kind == kind:
            return ReactionOutcome(changed=False, date=existing.date)

        now = utcnow()
        existing.kind = kind
        existing.date = now
        self.session.commit()
        return ReactionOutcome(changed=True, date=now)

    def remove_reaction(self, user_id: str, artwork_id: str) -> None:
        """Remove the user's reaction.

        Raises:
            ReactionNotFoundError: If the user had no reaction on the artwork.
        """
        result = self.session.execute(
            delete(Reaction).where(Reaction.artwork_id == artwork_id, Reaction.user_id == user_id)
        )
        if result.rowcount != 1:
            self.session.rollback()
            raise ReactionNotFoundError(artwork_id)
        self.session.commit()

    def list_reactions(self, artwork_id: str, requester_id: str) -> list[ReactionOut]:
        """List reactions newest first, hiding users in a ban relation with the requester."""
        find_visible_artwork(self.session, artwork_id, requester_id)
        rows = self.session.scalars(
            select(Reaction)
            .where(Reaction.artwork_id == artwork_id, visible_to(requester_id, Reaction.user_id))
            .order_by(Reaction.date.desc(), Reaction.user_id.desc())
        )
        return convert_rows(rows, _reaction_out, kind="reaction")

    # Comments

    def add_comment(self, user_id: str, artwork_id: str, body: str) -> Comment:
        """Add a comment under a visible artwork.

        Raises:
            InvalidCommentError: If the body length is out of bounds.
            ArtworkNotFoundError: If the artwork isn't visible to the user.
        """
        if not COMMENT_MIN_LENGTH <= len(body) <= COMMENT_MAX_LENGTH:
            raise InvalidCommentError(
                f"comments must be {COMMENT_MIN_LENGTH} to {COMMENT_MAX_LENGTH} characters long"
            )
        find_visible_artwork(self.session, artwork_id, user_id)

        comment = Comment(artwork_id=artwork_id, user_id=user_id, body=body, date=utcnow())
        self.session.add(comment)
        self.session.commit()
        self.session.refresh(comment)
        return comment

    def delete_comment(self, user_id: str, comment_id: str, artwork_id: str | None = None) -> None:
        """Delete a comment owned by the user.

        Raises:
            CommentNotFoundError: If the comment doesn't exist or belongs to someone else.
        """
        stmt = delete(Comment).where(Comment.id == comment_id, Comment.user_id == user_id)
        if artwork_id is not None:
            stmt = stmt.where(Comment.artwork_id == artwork_id)
        result = self.session.execute(stmt)
        if result.rowcount != 1:
            self.session.rollback()
            raise CommentNotFoundError(comment_id)
        self.session.commit()

    def list_comments(self, artwork_id: str, requester_id: str) -> list[CommentOut]:
        """List comments newest first, hiding users in a ban relation with the requester."""
        find_visible_artwork(self.session, artwork_id, requester_id)
        rows = self.session.scalars(
            select(Comment)
            .where(Comment.artwork_id == artwork_id, visible_to(requester_id, Comment.user_id))
            .order_by(Comment.date.desc(), Comment.id.desc())
        )
        return convert_rows(rows, _comment_out, kind="comment")

    # Aggregates

    def comment_counts(self, artwork_ids: Collection[str], requester_id: str) -> dict[str, int]:
        """Return visible comment counts keyed by artwork id."""
        if not artwork_ids:
            return {}
        rows = self.session.execute(
            select(Comment.artwork_id, func.count())
            .where(Comment.artwork_id.in_(artwork_ids), visible_to(requester_id, Comment.user_id))
            .group_by(Comment.artwork_id)
        )
        return {artwork_id: count for artwork_id, count in rows}

    def reaction_counts(self, artwork_ids: Collection[str], requester_id: str) -> dict[str, int]:
        """Return visible reaction counts keyed by artwork id."""
        if not artwork_ids:
            return {}
        rows = self.session.execute(
            select(Reaction.artwork_id, func.count())
            .where(Reaction.artwork_id.in_(artwork_ids), visible_to(requester_id, Reaction.user_id))
            .group_by(Reaction.artwork_id)
        )
        return {artwork_id: count for artwork_id, count in rows}

    def user_reaction(self, user_id: str, artwork_id: str) -> ReactionKind | None:
        """Return the user's own reaction on an artwork, if any."""
        reaction = self.session.get(Reaction, (artwork_id, user_id))
        return reaction.kind if reaction is not None else None

    def purge(self, artwork_id: str) -> None:
        """Drop every comment and reaction on an artwork without committing."""
        self.session.execute(delete(Comment).where(Comment.artwork_id == artwork_id))
        self.session.execute(delete(Reaction).where(Reaction.artwork_id == artwork_id))
