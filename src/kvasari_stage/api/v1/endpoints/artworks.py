# src/kvasari_stage/api/v1/endpoints/artworks.py
"""Artwork endpoints for the Kvasari API."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse

from kvasari_stage.api.v1.dependencies import (
    BlobStoreDep,
    CatalogDep,
    CurrentUserDep,
    FeedbackDep,
    UploadDep,
    ensure_same_user,
)
from kvasari_stage.api.v1.errors import to_http_exception
from kvasari_stage.models.artwork import TITLE_MAX_LENGTH, ArtworkType
from kvasari_stage.schemas.artwork import (
    ArtworkDetail,
    AuthorArtworksResponse,
    PublishResponse,
    TitleUpdate,
)
from kvasari_stage.schemas.feedback import (
    CommentCreate,
    CommentCreated,
    CommentOut,
    ReactionOut,
    ReactionSet,
    ReactionStatus,
)
from kvasari_stage.services.errors import ArtworkServiceError

router = APIRouter(prefix="/artworks", tags=["artworks"])


@router.post(
    "",
    response_model=PublishResponse,
    status_code=status.HTTP_201_CREATED,
)
async def publish_artwork(
    current_user: CurrentUserDep,
    pipeline: UploadDep,
    alias: Annotated[str, Form()],
    image: Annotated[UploadFile, File()],
    artwork_type: Annotated[ArtworkType, Form(alias="type")] = ArtworkType.PAINTING,
    title: Annotated[str | None, Form(max_length=TITLE_MAX_LENGTH)] = None,
) -> PublishResponse:
    """Publish an image as a new artwork of the authenticated user.

    Args:
        current_user: Authenticated user
        pipeline: Upload pipeline
        alias: Alias of the publishing user; must match the caller
        image: Image file (PNG, JPEG or WEBP)
        artwork_type: Visual medium of the artwork
        title: Optional title

    Returns:
        Identity, update date and detected format of the artwork

    Raises:
        HTTPException: 403 for another user's alias, 413/415 for rejected
            payloads, 409 for duplicates, 500 when the image can't be stored
    """
    ensure_same_user(current_user, alias)
    try:
        # Reading, hashing and storing the image is blocking work.
        result = await run_in_threadpool(
            pipeline.publish,
            image.file,
            current_user.id,
            artwork_type=artwork_type,
            title=title or None,
            declared_size=image.size,
        )
    except ArtworkServiceError as exc:
        raise to_http_exception(exc) from exc
    finally:
        await image.close()

    return PublishResponse(id=result.id, updated=result.updated, format=result.format)


@router.get("", response_model=AuthorArtworksResponse)
async def list_artworks(
    current_user: CurrentUserDep,
    catalog: CatalogDep,
    artist: str = Query(..., description="Alias of the author"),
    since: datetime = Query(..., description="Return a page of artworks added before this date"),
    latest: datetime = Query(..., description="Return every artwork added after this date"),
) -> AuthorArtworksResponse:
    """List one author's artworks with the two-cursor stream contract."""
    try:
        return catalog.list_author_artworks(artist, current_user.id, since, latest)
    except ArtworkServiceError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{artwork_id}/data", response_model=ArtworkDetail)
async def get_artwork_data(
    artwork_id: str,
    current_user: CurrentUserDep,
    catalog: CatalogDep,
) -> ArtworkDetail:
    """Return an artwork's metadata and feedback counts."""
    try:
        return catalog.get_artwork(artwork_id, current_user.id)
    except ArtworkServiceError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{artwork_id}/image", response_class=FileResponse)
async def get_artwork_image(
    artwork_id: str,
    current_user: CurrentUserDep,
    catalog: CatalogDep,
    blobs: BlobStoreDep,
) -> FileResponse:
    """Return the stored image bytes with their detected media type."""
    try:
        image_format = catalog.get_image_format(artwork_id, current_user.id)
    except ArtworkServiceError as exc:
        raise to_http_exception(exc) from exc

    if not blobs.exists(artwork_id, image_format):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Artwork not found",
        )
    return FileResponse(blobs.path_for(artwork_id, image_format), media_type=image_format.media_type)


@router.put("/{artwork_id}/title", status_code=status.HTTP_204_NO_CONTENT)
async def set_artwork_title(
    artwork_id: str,
    payload: TitleUpdate,
    current_user: CurrentUserDep,
    catalog: CatalogDep,
) -> None:
    """Rename an artwork owned by the caller."""
    try:
        catalog.set_title(artwork_id, current_user.id, payload.title)
    except ArtworkServiceError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/{artwork_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_artwork(
    artwork_id: str,
    current_user: CurrentUserDep,
    catalog: CatalogDep,
) -> None:
    """Soft delete an artwork owned by the caller."""
    try:
        catalog.delete_artwork(artwork_id, current_user.id)
    except ArtworkServiceError as exc:
        raise to_http_exception(exc) from exc


# Comments


@router.post(
    "/{artwork_id}/comments",
    response_model=CommentCreated,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    artwork_id: str,
    payload: CommentCreate,
    current_user: CurrentUserDep,
    feedback: FeedbackDep,
) -> CommentCreated:
    """Add a comment under an artwork."""
    try:
        comment = feedback.add_comment(current_user.id, artwork_id, payload.comment)
    except ArtworkServiceError as exc:
        raise to_http_exception(exc) from exc
    return CommentCreated(id=comment.id, date=comment.date)


@router.get("/{artwork_id}/comments", response_model=list[CommentOut])
async def list_comments(
    artwork_id: str,
    current_user: CurrentUserDep,
    feedback: FeedbackDep,
) -> list[CommentOut]:
    """List an artwork's comments, newest first."""
    try:
        return feedback.list_comments(artwork_id, current_user.id)
    except ArtworkServiceError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/{artwork_id}/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    artwork_id: str,
    comment_id: str,
    current_user: CurrentUserDep,
    feedback: FeedbackDep,
) -> None:
    """Delete one of the caller's comments."""
    try:
        feedback.delete_comment(current_user.id, comment_id, artwork_id=artwork_id)
    except ArtworkServiceError as exc:
        raise to_http_exception(exc) from exc


# Reactions


@router.put(
    "/{artwork_id}/reactions/{alias}",
    response_model=ReactionStatus,
    response_model_exclude_none=True,
)
async def set_reaction(
    artwork_id: str,
    alias: str,
    payload: ReactionSet,
    current_user: CurrentUserDep,
    feedback: FeedbackDep,
) -> ReactionStatus:
    """Set the caller's reaction; repeating the same reaction changes nothing."""
    ensure_same_user(current_user, alias)
    try:
        outcome = feedback.set_reaction(current_user.id, artwork_id, payload.reaction)
    except ArtworkServiceError as exc:
        raise to_http_exception(exc) from exc

    if outcome.changed:
        return ReactionStatus(status="changed", date=outcome.date)
    return ReactionStatus(status="unchanged")


@router.delete("/{artwork_id}/reactions/{alias}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_reaction(
    artwork_id: str,
    alias: str,
    current_user: CurrentUserDep,
    feedback: FeedbackDep,
) -> None:
    """Remove the caller's reaction."""
    ensure_same_user(current_user, alias)
    try:
        feedback.remove_reaction(current_user.id, artwork_id)
    except ArtworkServiceError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{artwork_id}/reactions", response_model=list[ReactionOut])
async def list_reactions(
    artwork_id: str,
    current_user: CurrentUserDep,
    feedback: FeedbackDep,
) -> list[ReactionOut]:
    """List an artwork's reactions, newest first."""
    try:
        return feedback.list_reactions(artwork_id, current_user.id)
    except ArtworkServiceError as exc:
        raise to_http_exception(exc) from exc
