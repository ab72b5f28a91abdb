"""Two-cursor stream synchronisation.

A client caches artworks locally and polls with two timestamps:

* ``since``: the point before which its cache still needs backfilling;
* ``latest``: the ``added`` timestamp of the newest artwork it holds.

One request answers three questions at once, without server-side sessions:
which older artworks to append (a page at most), which artworks appeared
after ``latest`` (all of them), and which artworks the client may hold that
have been deleted since (``latest < added < since``). Tombstones only live
until the reconciliation job purges them, so a client that stays away longer
than that may keep a deleted artwork around.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import ColumnElement, select
from sqlalchemy.orm import Session

from kvasari_stage.db.time import as_utc
from kvasari_stage.models.artwork import Artwork
from kvasari_stage.schemas.artwork import ArtworkPreview, StreamResponse
from kvasari_stage.services.feedback import FeedbackStore
from kvasari_stage.services.visibility import followed_by, visible_to
from kvasari_stage.utils.rows import convert_rows

logger = logging.getLogger(__name__)

__all__ = ["DEFAULT_PAGE_SIZE", "FeedEngine", "StreamBuckets", "collect_buckets"]

DEFAULT_PAGE_SIZE = 12

# Newest first; ties on ``added`` fall back to the artwork id so pages stay stable.
_NEWEST_FIRST = (Artwork.added.desc(), Artwork.id.desc())


@dataclass
class StreamBuckets:
    """Raw rows backing a stream response."""

    backfill: Sequence[Artwork]
    new: Sequence[Artwork]
    deleted_ids: list[str]


def collect_buckets(
    session: Session,
    scope: ColumnElement[bool],
    since: datetime,
    latest: datetime,
    page_size: int,
) -> StreamBuckets:
    """Run the backfill, new and tombstone queries over artworks matching ``scope``.

    Args:
        session: Database session.
        scope: Condition selecting the artworks the requester may see.
        since: Upper bound (exclusive) of the backfill page.
        latest: Lower bound (exclusive) of new artworks.
        page_size: Maximum number of backfilled artworks.

    Returns:
        The three buckets, each ordered newest first.
    """
    since = as_utc(since)
    latest = as_utc(latest)

    backfill: Sequence[Artwork] = []
    # Out of order cursors (since before latest) get no backfill.
    if since >= latest and page_size > 0:
        backfill = session.scalars(
            select(Artwork)
            .where(scope, Artwork.deleted.is_(False), Artwork.added < since)
            .order_by(*_NEWEST_FIRST)
            .limit(page_size)
        ).all()

    new = session.scalars(
        select(Artwork)
        .where(scope, Artwork.deleted.is_(False), Artwork.added > latest)
        .order_by(*_NEWEST_FIRST)
    ).all()

    deleted_ids = list(
        session.scalars(
            select(Artwork.id)
            .where(
                scope,
                Artwork.deleted.is_(True),
                Artwork.added > latest,
                Artwork.added < since,
            )
            .order_by(*_NEWEST_FIRST)
        )
    )
    return StreamBuckets(backfill=backfill, new=new, deleted_ids=deleted_ids)


def build_previews(
    feedback: FeedbackStore,
    artworks: Sequence[Artwork],
    requester_id: str,
) -> list[ArtworkPreview]:
    """Convert artworks into previews carrying visible comment and reaction counts."""
    ids = [artwork.id for artwork in artworks]
    comments = feedback.comment_counts(ids, requester_id)
    reactions = feedback.reaction_counts(ids, requester_id)

    def _preview(artwork: Artwork) -> ArtworkPreview:
        return ArtworkPreview(
            id=artwork.id,
            title=artwork.title,
            author_alias=artwork.author.alias,
            author_name=artwork.author.name,
            format=artwork.format,
            added=artwork.added,
            comments=comments.get(artwork.id, 0),
            reactions=reactions.get(artwork.id, 0),
        )

    return convert_rows(artworks, _preview, kind="artwork")


class FeedEngine:
    """Serves the stream of artworks published by the authors a user follows."""

    def __init__(
        self,
        session: Session,
        feedback: FeedbackStore | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.session = session
        self.feedback = feedback or FeedbackStore(session)
        self.page_size = page_size

    def scope_for(self, requester_id: str) -> ColumnElement[Any]:
        """Artworks by followed authors with no ban between them and the requester."""
        return followed_by(requester_id, Artwork.author_id) & visible_to(
            requester_id, Artwork.author_id
        )

    def get_stream(self, requester_id: str, since: datetime, latest: datetime) -> StreamResponse:
        """Return the backfill page, the new artworks and the deleted identifiers.

        Args:
            requester_id: Identifier of the user polling their stream.
            since: Timestamp before which the client still needs artworks.
            latest: ``added`` timestamp of the newest artwork the client holds.
        """
        buckets = collect_buckets(
            self.session,
            self.scope_for(requester_id),
            since,
            latest,
            self.page_size,
        )
        logger.debug(
            "stream for %s: %d backfilled, %d new, %d deleted",
            requester_id,
            len(buckets.backfill),
            len(buckets.new),
            len(buckets.deleted_ids),
        )
        return StreamResponse(
            artworks=build_previews(self.feedback, buckets.backfill, requester_id),
            new_artworks=build_previews(self.feedback, buckets.new, requester_id),
            deleted_ids=buckets.deleted_ids,
        )
