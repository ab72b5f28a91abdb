# src/kvasari_stage/models/artwork.py
"""SQLAlchemy model for content-addressed artworks."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kvasari_stage.db.session import Base
from kvasari_stage.db.time import UTCDateTime, utcnow
from kvasari_stage.models.user import User

# Length of a hex encoded SHA-256 digest.
ARTWORK_ID_LENGTH = 64
TITLE_MAX_LENGTH = 250


class ArtworkType(str, enum.Enum):
    """Visual medium of an artwork."""

    PAINTING = "Painting"
    DRAWING = "Drawing"
    SCULPTURE = "Sculpture"
    ARCHITECTURE = "Architecture"
    PHOTOGRAPH = "Photograph"


class ImageFormat(str, enum.Enum):
    """Binary formats detected from uploaded bytes, doubling as file extensions."""

    PNG = "png"
    JPG = "jpg"
    WEBP = "webp"

    @property
    def media_type(self) -> str:
        """Return the MIME type served for this format."""
        return _MEDIA_TYPES[self]


_MEDIA_TYPES = {
    ImageFormat.PNG: "image/png",
    ImageFormat.JPG: "image/jpeg",
    ImageFormat.WEBP: "image/webp",
}


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Artwork(Base):
    """Artwork metadata keyed by the SHA-256 digest of its image.

    The ``deleted`` flag is a tombstone: rows stay around until the
    reconciliation job removes them together with their blob.
    """

    __tablename__ = "artwork"
    __table_args__ = (
        Index("ix_artwork_author_added", "author_id", "added"),
        Index("ix_artwork_deleted", "deleted"),
        CheckConstraint("year BETWEEN -10000 AND 10000", name="ck_artwork_year"),
    )

    id: Mapped[str] = mapped_column(String(ARTWORK_ID_LENGTH), primary_key=True)
    author_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[ArtworkType] = mapped_column(
        Enum(ArtworkType, name="artwork_type", values_callable=_enum_values),
        nullable=False,
        default=ArtworkType.PAINTING,
    )
    format: Mapped[ImageFormat] = mapped_column(
        Enum(ImageFormat, name="image_format", values_callable=_enum_values),
        nullable=False,
    )
    title: Mapped[str | None] = mapped_column(String(TITLE_MAX_LENGTH), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    # User supplied estimate of when the work itself was made.
    created: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    added: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    author: Mapped[User] = relationship(User, lazy="joined")
