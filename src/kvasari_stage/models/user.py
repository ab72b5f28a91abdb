# src/kvasari_stage/models/user.py
"""SQLAlchemy models for users and their follow/ban relations.

Registration and relation bookkeeping live outside this service; these tables
are the read side consumed by the artwork core.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from kvasari_stage.db.session import Base
from kvasari_stage.db.time import UTCDateTime, utcnow

ALIAS_MIN_LENGTH = 5
ALIAS_MAX_LENGTH = 15


def new_user_id() -> str:
    """Return a fresh random user identifier."""
    return str(uuid.uuid4())


class User(Base):
    """Artist identity, addressed publicly by its alias."""

    __tablename__ = "user"
    __table_args__ = (
        CheckConstraint(
            f"length(alias) >= {ALIAS_MIN_LENGTH} AND length(alias) <= {ALIAS_MAX_LENGTH}",
            name="ck_user_alias_length",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_user_id)
    alias: Mapped[str] = mapped_column(String(ALIAS_MAX_LENGTH), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    created: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


class Follow(Base):
    """``follower_id`` receives artworks published by ``target_id``."""

    __tablename__ = "follow"
    __table_args__ = (Index("ix_follow_target_id", "target_id"),)

    follower_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        primary_key=True,
    )
    target_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        primary_key=True,
    )
    date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


class Ban(Base):
    """``source_id`` has banned ``target_id``."""

    __tablename__ = "ban"
    __table_args__ = (Index("ix_ban_target_id", "target_id"),)

    source_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        primary_key=True,
    )
    target_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        primary_key=True,
    )
    date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
