"""Exceptions raised by the artwork services.

The HTTP layer maps each class to a status code in one place; services only
raise them.
"""

from __future__ import annotations

from collections.abc import Iterable


class ArtworkServiceError(RuntimeError):
    """Base exception for failures surfaced by the artwork services."""


# Validation


class PayloadTooLargeError(ArtworkServiceError):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"image is too large; limit file sizes to {limit // (1024 * 1024)}MiB")


class UnsupportedFormatError(ArtworkServiceError):
    """Raised when sniffed bytes do not match an accepted image format."""

    def __init__(self, accepted: Iterable[str]) -> None:
        self.accepted = tuple(accepted)
        super().__init__(f"not a valid file type; choose among: {', '.join(self.accepted)}")


class InvalidCommentError(ArtworkServiceError):
    """Raised when a comment body falls outside the allowed length."""


# Conflicts


class DuplicateArtworkError(ArtworkServiceError):
    """Raised when the same image is already published and live."""

    def __init__(self, artwork_id: str) -> None:
        self.artwork_id = artwork_id
        super().__init__("The artwork image is already present.")


class ResurrectionConflictError(ArtworkServiceError):
    """Raised when a tombstoned artwork vanished while being restored.

    The reconciliation job won the race; uploading again starts afresh.
    """

    def __init__(self, artwork_id: str) -> None:
        self.artwork_id = artwork_id
        super().__init__("The artwork was removed concurrently; retry the upload.")


# Not found, or not visible to the requester


class ArtworkNotFoundError(ArtworkServiceError):
    """Raised when an artwork is missing, deleted, not owned or hidden by a ban."""


class CommentNotFoundError(ArtworkServiceError):
    """Raised when a comment is missing or owned by someone else."""


class ReactionNotFoundError(ArtworkServiceError):
    """Raised when removing a reaction that was never set."""


class UserNotFoundError(ArtworkServiceError):
    """Raised when a user is unknown or hidden from the requester by a ban."""


class NotModifiedError(ArtworkServiceError):
    """Raised when an edit matched nothing the requester owns."""


# Storage


class BlobStorageError(ArtworkServiceError):
    """Raised when an image blob cannot be written to disk."""
