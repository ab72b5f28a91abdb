# src/kvasari_stage/schemas/artwork.py
"""Artwork-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from kvasari_stage.models.artwork import TITLE_MAX_LENGTH, ArtworkType, ImageFormat
from kvasari_stage.models.feedback import ReactionKind
from kvasari_stage.schemas.common import KvasariModel


class PublishResponse(KvasariModel):
    """Identity, insertion date and detected format of a published artwork."""

    id: str
    updated: datetime
    format: ImageFormat


class TitleUpdate(KvasariModel):
    """Schema for renaming an artwork."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)


class ArtworkPreview(KvasariModel):
    """Artwork entry shown in streams and profile listings."""

    id: str
    title: str | None = None
    author_alias: str
    author_name: str | None = None
    format: ImageFormat
    added: datetime
    comments: int = 0
    reactions: int = 0


class ArtworkDetail(KvasariModel):
    """Full artwork metadata returned by the data route."""

    id: str
    title: str | None = None
    description: str | None = None
    year: int | None = None
    location: str | None = None
    type: ArtworkType
    format: ImageFormat
    author_id: str
    author_alias: str
    author_name: str | None = None
    created: datetime | None = None
    added: datetime
    updated: datetime
    comments: int = 0
    reactions: int = 0
    user_reaction: ReactionKind | None = None


class StreamResponse(KvasariModel):
    """Three disjoint collections synchronising a client's stream cache.

    ``artworks`` holds at most one page of items older than ``since``,
    ``new_artworks`` everything added after ``latest`` and ``deleted_ids`` the
    identifiers removed inside the window the client already trusts.
    """

    artworks: list[ArtworkPreview] = Field(default_factory=list)
    new_artworks: list[ArtworkPreview] = Field(default_factory=list)
    deleted_ids: list[str] = Field(default_factory=list)


class AuthorArtworksResponse(StreamResponse):
    """A single author's stream buckets along with their live artwork count."""

    total: int = 0
