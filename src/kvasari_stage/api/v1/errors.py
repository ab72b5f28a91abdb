"""Translation of service exceptions into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from kvasari_stage.services.errors import (
    ArtworkNotFoundError,
    ArtworkServiceError,
    BlobStorageError,
    CommentNotFoundError,
    DuplicateArtworkError,
    InvalidCommentError,
    NotModifiedError,
    PayloadTooLargeError,
    ReactionNotFoundError,
    ResurrectionConflictError,
    UnsupportedFormatError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[ArtworkServiceError], int] = {
    PayloadTooLargeError: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    UnsupportedFormatError: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    InvalidCommentError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DuplicateArtworkError: status.HTTP_409_CONFLICT,
    ResurrectionConflictError: status.HTTP_409_CONFLICT,
    ArtworkNotFoundError: status.HTTP_404_NOT_FOUND,
    CommentNotFoundError: status.HTTP_404_NOT_FOUND,
    ReactionNotFoundError: status.HTTP_404_NOT_FOUND,
    UserNotFoundError: status.HTTP_404_NOT_FOUND,
    NotModifiedError: status.HTTP_404_NOT_FOUND,
    BlobStorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_NOT_FOUND_DETAIL = {
    ArtworkNotFoundError: "Artwork not found",
    CommentNotFoundError: "Comment not found",
    ReactionNotFoundError: "Reaction not found",
    UserNotFoundError: "User not found",
    NotModifiedError: "Artwork not found",
}


def to_http_exception(exc: ArtworkServiceError) -> HTTPException:
    """Return the ``HTTPException`` matching a service failure."""
    status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("request failed: %s", exc)
        return HTTPException(status_code=status_code, detail="Internal server error")
    detail = _NOT_FOUND_DETAIL.get(type(exc), str(exc))
    return HTTPException(status_code=status_code, detail=detail)
