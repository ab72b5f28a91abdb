"""Artwork metadata: lookups, edits, soft deletes and author listings.

Every read that would reveal an artwork to someone its author banned (or who
banned the author) behaves as if the artwork didn't exist.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kvasari_stage.db.time import utcnow
from kvasari_stage.models.artwork import Artwork, ArtworkType, ImageFormat
from kvasari_stage.schemas.artwork import ArtworkDetail, AuthorArtworksResponse
from kvasari_stage.services.errors import (
    ArtworkNotFoundError,
    NotModifiedError,
    UserNotFoundError,
)
from kvasari_stage.services.feedback import FeedbackStore
from kvasari_stage.services.identity import IdentityDirectory
from kvasari_stage.services.stream import DEFAULT_PAGE_SIZE, build_previews, collect_buckets
from kvasari_stage.services.visibility import find_visible_artwork

logger = logging.getLogger(__name__)

__all__ = ["ArtworkCatalog"]


class ArtworkCatalog:
    """Authoritative artwork metadata backed by the ``artwork`` table."""

    def __init__(
        self,
        session: Session,
        feedback: FeedbackStore | None = None,
        identity: IdentityDirectory | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.session = session
        self.feedback = feedback or FeedbackStore(session)
        self.identity = identity or IdentityDirectory(session)
        self.page_size = page_size

    # Reads

    def get_artwork(self, artwork_id: str, requester_id: str) -> ArtworkDetail:
        """Return an artwork's metadata along with its visible feedback counts.

        Raises:
            ArtworkNotFoundError: If the artwork is missing, deleted or hidden by a ban.
        """
        artwork = find_visible_artwork(self.session, artwork_id, requester_id)
        ids = [artwork.id]
        return ArtworkDetail(
            id=artwork.id,
            title=artwork.title,
            description=artwork.description,
            year=artwork.year,
            location=artwork.location,
            type=artwork.type,
            format=artwork.format,
            author_id=artwork.author_id,
            author_alias=artwork.author.alias,
            author_name=artwork.author.name,
            created=artwork.created,
            added=artwork.added,
            updated=artwork.updated,
            comments=self.feedback.comment_counts(ids, requester_id).get(artwork.id, 0),
            reactions=self.feedback.reaction_counts(ids, requester_id).get(artwork.id, 0),
            user_reaction=self.feedback.user_reaction(requester_id, artwork.id),
        )

    def get_image_format(self, artwork_id: str, requester_id: str) -> ImageFormat:
        """Return the stored format of a visible artwork's image.

        Raises:
            ArtworkNotFoundError: If the artwork is missing, deleted or hidden by a ban.
        """
        return find_visible_artwork(self.session, artwork_id, requester_id).format

    def list_author_artworks(
        self,
        author_alias: str,
        requester_id: str,
        since: datetime,
        latest: datetime,
    ) -> AuthorArtworksResponse:
        """Return one author's stream buckets plus their live artwork count.

        Raises:
            UserNotFoundError: If the author is unknown or shares a ban with the requester.
        """
        author = self.identity.get_by_alias(author_alias)
        if author is None or self.identity.either_banned(author.id, requester_id):
            raise UserNotFoundError(author_alias)

        buckets = collect_buckets(
            self.session,
            Artwork.author_id == author.id,
            since,
            latest,
            self.page_size,
        )
        total = self.session.scalar(
            select(func.count())
            .select_from(Artwork)
            .where(Artwork.author_id == author.id, Artwork.deleted.is_(False))
        )
        return AuthorArtworksResponse(
            artworks=build_previews(self.feedback, buckets.backfill, requester_id),
            new_artworks=build_previews(self.feedback, buckets.new, requester_id),
            deleted_ids=buckets.deleted_ids,
            total=total or 0,
        )

    # Owner edits

    def delete_artwork(self, artwork_id: str, owner_id: str) -> None:
        """Soft delete an artwork owned by ``owner_id``.

        Raises:
            ArtworkNotFoundError: If the artwork is missing, not owned, or already deleted.
        """
        result = self.session.execute(
            update(Artwork)
            .where(
                Artwork.id == artwork_id,
                Artwork.author_id == owner_id,
                Artwork.deleted.is_(False),
            )
            .values(deleted=True, updated=utcnow())
        )
        if result.rowcount != 1:
            self.session.rollback()
            raise ArtworkNotFoundError(artwork_id)
        self.session.commit()
        logger.info("artwork %s soft deleted by %s", artwork_id, owner_id)

    def set_title(self, artwork_id: str, owner_id: str, title: str) -> datetime:
        """Rename an artwork owned by ``owner_id`` and return the new update date.

        Raises:
            NotModifiedError: If no live artwork with that id belongs to the owner.
        """
        now = utcnow()
        result = self.session.execute(
            update(Artwork)
            .where(
                Artwork.id == artwork_id,
                Artwork.author_id == owner_id,
                Artwork.deleted.is_(False),
            )
            .values(title=title, updated=now)
        )
        if result.rowcount != 1:
            self.session.rollback()
            raise NotModifiedError(artwork_id)
        self.session.commit()
        return now

    # Storage bookkeeping used by the upload pipeline and the reconciler

    def find(self, artwork_id: str) -> Artwork | None:
        """Return the row for ``artwork_id`` whatever its tombstone state."""
        return self.session.get(Artwork, artwork_id, populate_existing=True)

    def insert(
        self,
        artwork_id: str,
        author_id: str,
        image_format: ImageFormat,
        artwork_type: ArtworkType = ArtworkType.PAINTING,
        title: str | None = None,
    ) -> Artwork:
        """Insert and commit a new live artwork row.

        Raises:
            sqlalchemy.exc.IntegrityError: If the identity is already taken.
        """
        now = utcnow()
        artwork = Artwork(
            id=artwork_id,
            author_id=author_id,
            format=image_format,
            type=artwork_type,
            title=title,
            added=now,
            updated=now,
            deleted=False,
        )
        self.session.add(artwork)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return artwork

    def resurrect(self, artwork_id: str, author_id: str) -> datetime | None:
        """Clear the tombstone of an author's deleted artwork.

        Feedback left before the deletion is dropped, the ``added`` date is
        kept and ``updated`` moves to now.

        Returns:
            The new update date, or ``None`` when no tombstoned row matched.
        """
        now = utcnow()
        result = self.session.execute(
            update(Artwork)
            .where(
                Artwork.id == artwork_id,
                Artwork.author_id == author_id,
                Artwork.deleted.is_(True),
            )
            .values(deleted=False, updated=now)
        )
        if result.rowcount != 1:
            self.session.rollback()
            return None
        self.feedback.purge(artwork_id)
        self.session.commit()
        return now

    def retombstone(self, artwork_id: str) -> None:
        """Mark an artwork deleted again without touching its feedback."""
        self.session.execute(
            update(Artwork).where(Artwork.id == artwork_id).values(deleted=True)
        )
        self.session.commit()

    def purge(self, artwork_id: str, *, only_deleted: bool = True, commit: bool = True) -> bool:
        """Permanently delete an artwork row along with its comments and reactions.

        Args:
            artwork_id: Identity of the artwork.
            only_deleted: Restrict the delete to tombstoned rows.
            commit: Commit immediately; pass ``False`` to keep the transaction open.

        Returns:
            ``True`` when a row was removed.
        """
        stmt = delete(Artwork).where(Artwork.id == artwork_id)
        if only_deleted:
            stmt = stmt.where(Artwork.deleted.is_(True))
        # Comments and reactions follow through ON DELETE CASCADE.
        result = self.session.execute(stmt)
        removed = result.rowcount == 1
        if commit:
            self.session.commit()
        return removed

    def list_tombstoned(self) -> list[tuple[str, ImageFormat]]:
        """Return identity and format of every soft-deleted artwork."""
        rows = self.session.execute(
            select(Artwork.id, Artwork.format)
            .where(Artwork.deleted.is_(True))
            .order_by(Artwork.added, Artwork.id)
        )
        return [(artwork_id, image_format) for artwork_id, image_format in rows]
