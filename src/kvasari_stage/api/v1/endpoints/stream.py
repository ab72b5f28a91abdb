# src/kvasari_stage/api/v1/endpoints/stream.py
"""Stream endpoint for the Kvasari API."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Query

from kvasari_stage.api.v1.dependencies import CurrentUserDep, FeedDep, ensure_same_user
from kvasari_stage.schemas.artwork import StreamResponse

router = APIRouter(prefix="/users", tags=["stream"])


@router.get("/{alias}/stream", response_model=StreamResponse)
async def get_stream(
    alias: str,
    current_user: CurrentUserDep,
    feed: FeedDep,
    since: datetime = Query(..., description="Return a page of artworks added before this date"),
    latest: datetime = Query(..., description="Date of the newest artwork held by the client"),
) -> StreamResponse:
    """Return the caller's stream of artworks by followed authors.

    Args:
        alias: Alias of the caller; streams are private
        current_user: Authenticated user
        feed: Feed engine
        since: Backfill cursor
        latest: Newest known cursor

    Returns:
        Backfill page, new artworks and identifiers deleted since the last poll

    Raises:
        HTTPException: If the alias doesn't belong to the caller
    """
    ensure_same_user(current_user, alias)
    return feed.get_stream(current_user.id, since, latest)
