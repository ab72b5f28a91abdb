"""Publishing artworks: sniff, hash, deduplicate, record, then store.

The catalog row and the image blob live in two stores with no shared
transaction. The row is written first and the blob second; when the blob
write fails the row change is undone. Between the two steps a reader may see
a row whose image isn't on disk yet, and a crash in that window leaves the row
behind without compensation.
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from kvasari_stage.core.settings import DEFAULT_MAX_UPLOAD_BYTES
from kvasari_stage.models.artwork import ArtworkType, ImageFormat
from kvasari_stage.services.blob_store import BlobStore
from kvasari_stage.services.catalog import ArtworkCatalog
from kvasari_stage.services.errors import (
    BlobStorageError,
    DuplicateArtworkError,
    PayloadTooLargeError,
    ResurrectionConflictError,
    UnsupportedFormatError,
)
from kvasari_stage.utils.hash import content_hasher
from kvasari_stage.utils.image_format import (
    ACCEPTED_MEDIA_TYPES,
    SNIFF_LENGTH,
    detect_image_format,
)

logger = logging.getLogger(__name__)

__all__ = ["PublishResult", "UploadPipeline"]

_READ_CHUNK_SIZE = 64 * 1024
# Payloads up to this size stay in memory while being spooled.
_SPOOL_MEMORY_SIZE = 1024 * 1024


@dataclass(frozen=True)
class PublishResult:
    """Outcome of a successful publish."""

    id: str
    updated: datetime
    format: ImageFormat
    resurrected: bool = False


@dataclass
class _SpooledPayload:
    file: BinaryIO
    digest: str
    image_format: ImageFormat
    size: int


class UploadPipeline:
    """Turns an uploaded byte stream into a live artwork and its image blob."""

    def __init__(
        self,
        catalog: ArtworkCatalog,
        blobs: BlobStore,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self.catalog = catalog
        self.blobs = blobs
        self.max_upload_bytes = max_upload_bytes

    def publish(
        self,
        stream: BinaryIO,
        author_id: str,
        artwork_type: ArtworkType = ArtworkType.PAINTING,
        title: str | None = None,
        declared_size: int | None = None,
    ) -> PublishResult:
        """Publish an image on behalf of ``author_id``.

        Args:
            stream: Readable binary stream positioned at the start of the image.
            author_id: Identifier of the authenticated author.
            artwork_type: Visual medium of the artwork.
            title: Optional title.
            declared_size: Size announced by the transport, if known.

        Returns:
            The artwork identity, its update date and the detected format.

        Raises:
            PayloadTooLargeError: If the payload exceeds the configured limit.
            UnsupportedFormatError: If the bytes aren't PNG, JPEG or WEBP.
            DuplicateArtworkError: If the same image is already live.
            ResurrectionConflictError: If a tombstoned copy vanished while restoring it.
            BlobStorageError: If the image couldn't be written to disk.
        """
        if declared_size is not None and declared_size > self.max_upload_bytes:
            raise PayloadTooLargeError(self.max_upload_bytes)

        payload = self._spool(stream)
        try:
            return self._record_and_store(payload, author_id, artwork_type, title)
        finally:
            payload.file.close()

    def _spool(self, stream: BinaryIO) -> _SpooledPayload:
        """Copy the stream aside, enforcing the size limit, sniffing and hashing on the way."""
        spool = tempfile.SpooledTemporaryFile(max_size=_SPOOL_MEMORY_SIZE)
        hasher = content_hasher()
        head = b""
        size = 0
        try:
            while True:
                chunk = stream.read(_READ_CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > self.max_upload_bytes:
                    raise PayloadTooLargeError(self.max_upload_bytes)
                if len(head) < SNIFF_LENGTH:
                    head += chunk[: SNIFF_LENGTH - len(head)]
                    # Reject unsupported content before buffering the rest.
                    if len(head) >= SNIFF_LENGTH and detect_image_format(head) is None:
                        raise UnsupportedFormatError(ACCEPTED_MEDIA_TYPES)
                hasher.update(chunk)
                spool.write(chunk)

            image_format = detect_image_format(head)
            if image_format is None:
                raise UnsupportedFormatError(ACCEPTED_MEDIA_TYPES)
        except BaseException:
            spool.close()
            raise

        return _SpooledPayload(
            file=spool,  # type: ignore[arg-type]
            digest=hasher.hexdigest(),
            image_format=image_format,
            size=size,
        )

    def _record_and_store(
        self,
        payload: _SpooledPayload,
        author_id: str,
        artwork_type: ArtworkType,
        title: str | None,
    ) -> PublishResult:
        digest = payload.digest
        existing = self.catalog.find(digest)
        resurrected = False

        if existing is not None and not existing.deleted:
            raise DuplicateArtworkError(digest)

        if existing is not None and existing.author_id == author_id:
            updated = self.catalog.resurrect(digest, author_id)
            if updated is None:
                raise ResurrectionConflictError(digest)
            resurrected = True
            logger.info("artwork %s restored by %s", digest, author_id)
        else:
            if existing is not None:
                # Another author's tombstone holds the identity until reconciliation.
                self.catalog.purge(digest)
            try:
                artwork = self.catalog.insert(
                    digest,
                    author_id,
                    payload.image_format,
                    artwork_type=artwork_type,
                    title=title,
                )
            except IntegrityError as exc:
                raise DuplicateArtworkError(digest) from exc
            updated = artwork.updated
            logger.info("artwork %s added by %s (%d bytes)", digest, author_id, payload.size)

        # Checked only after the row change is committed, so a blob removed by
        # a concurrent reconciliation is noticed and written again.
        if not self.blobs.exists(digest, payload.image_format):
            try:
                self.blobs.write(digest, payload.image_format, payload.file)
            except OSError as exc:
                logger.error("couldn't store image %s: %s", digest, exc)
                self._compensate(digest, resurrected)
                raise BlobStorageError(f"couldn't store image {digest}") from exc

        return PublishResult(
            id=digest,
            updated=updated,
            format=payload.image_format,
            resurrected=resurrected,
        )

    def _compensate(self, digest: str, resurrected: bool) -> None:
        """Undo the catalog change after a failed blob write, as far as possible."""
        try:
            if resurrected:
                self.catalog.retombstone(digest)
            else:
                self.catalog.purge(digest, only_deleted=False)
        except SQLAlchemyError:
            logger.exception("couldn't roll back catalog entry %s after a failed write", digest)
