# src/kvasari_stage/schemas/feedback.py
"""Comment and reaction Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from kvasari_stage.models.feedback import COMMENT_MAX_LENGTH, COMMENT_MIN_LENGTH, ReactionKind
from kvasari_stage.schemas.common import KvasariModel


class CommentCreate(KvasariModel):
    """Schema for adding a comment to an artwork."""

    comment: str = Field(..., min_length=COMMENT_MIN_LENGTH, max_length=COMMENT_MAX_LENGTH)


class CommentCreated(KvasariModel):
    """Identifier and date assigned to a new comment."""

    id: str
    date: datetime


class CommentOut(KvasariModel):
    """Comment as listed under an artwork."""

    id: str
    author_id: str
    author_alias: str
    author_name: str | None = None
    comment: str
    date: datetime


class ReactionSet(KvasariModel):
    """Schema for setting a reaction."""

    reaction: ReactionKind


class ReactionStatus(KvasariModel):
    """Outcome of setting a reaction; ``date`` is only present when it changed."""

    status: Literal["changed", "unchanged"]
    date: datetime | None = None


class ReactionOut(KvasariModel):
    """Reaction as listed under an artwork."""

    author_id: str
    author_alias: str
    author_name: str | None = None
    reaction: ReactionKind
    date: datetime
