# src/kvasari_stage/models/feedback.py
"""Models capturing comments and reactions on artworks."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kvasari_stage.db.session import Base
from kvasari_stage.db.time import UTCDateTime, utcnow
from kvasari_stage.models.user import User

COMMENT_MIN_LENGTH = 10
COMMENT_MAX_LENGTH = 3000


class ReactionKind(str, enum.Enum):
    """Closed set of reactions a user can leave on an artwork."""

    LIKE = "Like"
    PERPLEXED = "Perplexed"


def new_comment_id() -> str:
    """Return a fresh random comment identifier."""
    return str(uuid.uuid4())


class Comment(Base):
    """Text left by a user under an artwork."""

    __tablename__ = "comment"
    __table_args__ = (Index("ix_comment_artwork_date", "artwork_id", "date"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_comment_id)
    artwork_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("artwork.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    user: Mapped[User] = relationship(User, lazy="joined")


class Reaction(Base):
    """Per-user reaction on an artwork.

    The composite primary key allows a single reaction per user and artwork.
    """

    __tablename__ = "reaction"
    __table_args__ = (Index("ix_reaction_artwork_id", "artwork_id"),)

    artwork_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("artwork.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        primary_key=True,
    )
    kind: Mapped[ReactionKind] = mapped_column(
        Enum(ReactionKind, name="reaction_kind", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    # Only moves when the reaction actually changes.
    date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    user: Mapped[User] = relationship(User, lazy="joined")
