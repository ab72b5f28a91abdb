# tests/test_upload.py
"""Tests for the upload pipeline."""

import hashlib
import io
from types import SimpleNamespace

import pytest
from sqlalchemy import func, select

from factories import as_stream, jpeg_bytes, png_bytes, webp_bytes
from kvasari_stage.models import Artwork, ArtworkType, ImageFormat
from kvasari_stage.services.errors import (
    BlobStorageError,
    DuplicateArtworkError,
    PayloadTooLargeError,
    ResurrectionConflictError,
    UnsupportedFormatError,
)


def _row_count(db_session) -> int:
    return db_session.scalar(select(func.count()).select_from(Artwork))


def test_publish_stores_row_and_blob(pipeline, catalog, blob_store, alice) -> None:
    data = png_bytes()

    result = pipeline.publish(as_stream(data), alice.id, title="Sunflowers")

    assert result.id == hashlib.sha256(data).hexdigest()
    assert result.format is ImageFormat.PNG
    assert result.resurrected is False
    assert result.updated.tzinfo is not None

    artwork = catalog.find(result.id)
    assert artwork is not None
    assert artwork.author_id == alice.id
    assert artwork.title == "Sunflowers"
    assert artwork.type is ArtworkType.PAINTING
    assert artwork.deleted is False

    assert blob_store.path_for(result.id, ImageFormat.PNG).read_bytes() == data


@pytest.mark.parametrize(
    ("factory", "expected"),
    [(jpeg_bytes, ImageFormat.JPG), (webp_bytes, ImageFormat.WEBP)],
)
def test_publish_detects_format_from_bytes(pipeline, blob_store, alice, factory, expected) -> None:
    result = pipeline.publish(as_stream(factory()), alice.id)

    assert result.format is expected
    assert blob_store.exists(result.id, expected)


def test_publish_keeps_artwork_type(pipeline, catalog, alice) -> None:
    result = pipeline.publish(as_stream(png_bytes()), alice.id, artwork_type=ArtworkType.SCULPTURE)

    assert catalog.find(result.id).type is ArtworkType.SCULPTURE


def test_duplicate_live_upload_is_rejected_without_second_write(
    pipeline, blob_store, db_session, alice, bob, mocker
) -> None:
    data = png_bytes()
    pipeline.publish(as_stream(data), alice.id)
    write_spy = mocker.spy(blob_store, "write")

    with pytest.raises(DuplicateArtworkError):
        pipeline.publish(as_stream(data), alice.id)
    with pytest.raises(DuplicateArtworkError):
        pipeline.publish(as_stream(data), bob.id)

    assert write_spy.call_count == 0
    assert _row_count(db_session) == 1


def test_reupload_after_delete_resurrects_same_identity(
    pipeline, catalog, feedback, db_session, alice, bob
) -> None:
    data = png_bytes()
    first = pipeline.publish(as_stream(data), alice.id)
    added = catalog.find(first.id).added
    feedback.add_comment(bob.id, first.id, "What a lovely piece of work")
    catalog.delete_artwork(first.id, alice.id)

    second = pipeline.publish(as_stream(data), alice.id)

    assert second.id == first.id
    assert second.resurrected is True
    assert second.updated >= first.updated
    assert _row_count(db_session) == 1

    artwork = catalog.find(first.id)
    assert artwork.deleted is False
    assert artwork.added == added
    assert feedback.list_comments(first.id, alice.id) == []


def test_reupload_of_another_authors_tombstone_creates_fresh_artwork(
    pipeline, catalog, db_session, alice, bob
) -> None:
    data = png_bytes()
    first = pipeline.publish(as_stream(data), alice.id)
    catalog.delete_artwork(first.id, alice.id)

    second = pipeline.publish(as_stream(data), bob.id)

    assert second.id == first.id
    assert second.resurrected is False
    artwork = catalog.find(first.id)
    assert artwork.author_id == bob.id
    assert artwork.deleted is False
    assert _row_count(db_session) == 1


def test_resurrection_rewrites_a_missing_blob(pipeline, catalog, blob_store, alice) -> None:
    data = png_bytes()
    first = pipeline.publish(as_stream(data), alice.id)
    catalog.delete_artwork(first.id, alice.id)
    blob_store.delete(first.id, ImageFormat.PNG)

    pipeline.publish(as_stream(data), alice.id)

    assert blob_store.path_for(first.id, ImageFormat.PNG).read_bytes() == data


class _CountingStream(io.BytesIO):
    reads = 0

    def read(self, size=-1):
        self.reads += 1
        return super().read(size)


def test_declared_size_over_limit_is_rejected_before_reading(pipeline, alice) -> None:
    stream = _CountingStream(png_bytes())

    with pytest.raises(PayloadTooLargeError):
        pipeline.publish(stream, alice.id, declared_size=pipeline.max_upload_bytes + 1)

    assert stream.reads == 0


def test_oversized_stream_is_rejected(pipeline, blob_store, db_session, alice) -> None:
    with pytest.raises(PayloadTooLargeError):
        pipeline.publish(as_stream(png_bytes(pipeline.max_upload_bytes + 1)), alice.id)

    assert _row_count(db_session) == 0
    assert list(blob_store.root.iterdir()) == []


def test_payload_at_limit_is_accepted(pipeline, alice) -> None:
    result = pipeline.publish(as_stream(png_bytes(pipeline.max_upload_bytes)), alice.id)

    assert result.format is ImageFormat.PNG


@pytest.mark.parametrize(
    "data",
    [b"GIF89a" + b"\x00" * 2048, b"plain text, not an image", b""],
)
def test_unsupported_content_is_rejected(pipeline, db_session, alice, data) -> None:
    with pytest.raises(UnsupportedFormatError) as excinfo:
        pipeline.publish(as_stream(data), alice.id)

    assert "image/png" in excinfo.value.accepted
    assert _row_count(db_session) == 0


def test_failed_blob_write_removes_new_row(pipeline, blob_store, db_session, alice, mocker) -> None:
    mocker.patch.object(blob_store, "write", side_effect=OSError("disk full"))

    with pytest.raises(BlobStorageError):
        pipeline.publish(as_stream(png_bytes()), alice.id)

    assert _row_count(db_session) == 0


def test_failed_blob_write_on_resurrection_restores_tombstone(
    pipeline, catalog, blob_store, alice, mocker
) -> None:
    data = png_bytes()
    first = pipeline.publish(as_stream(data), alice.id)
    catalog.delete_artwork(first.id, alice.id)
    blob_store.delete(first.id, ImageFormat.PNG)
    mocker.patch.object(blob_store, "write", side_effect=OSError("read-only file system"))

    with pytest.raises(BlobStorageError):
        pipeline.publish(as_stream(data), alice.id)

    assert catalog.find(first.id).deleted is True


def test_resurrection_of_a_purged_tombstone_conflicts(
    pipeline, catalog, blob_store, db_session, alice, mocker
) -> None:
    data = png_bytes()
    artwork_id = pipeline.publish(as_stream(data), alice.id).id
    catalog.delete_artwork(artwork_id, alice.id)
    # Reconciliation removes the row after the pipeline has seen the tombstone.
    stale = SimpleNamespace(id=artwork_id, author_id=alice.id, deleted=True)
    catalog.purge(artwork_id)
    mocker.patch.object(catalog, "find", return_value=stale)
    write_spy = mocker.spy(blob_store, "write")

    with pytest.raises(ResurrectionConflictError):
        pipeline.publish(as_stream(data), alice.id)

    assert _row_count(db_session) == 0
    assert write_spy.call_count == 0
