"""Permanent removal of soft-deleted artworks and their images.

Deleting an artwork only sets its tombstone, which the stream reports to
clients holding the artwork. This module bounds how long tombstones (and the
images behind them) survive: every pass removes the rows for good, cascading
to their comments and reactions, then unlinks the blobs.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kvasari_stage.services.blob_store import BlobStore
from kvasari_stage.services.catalog import ArtworkCatalog

# Configure logger for this module
logger = logging.getLogger(__name__)

__all__ = ["ReconciliationReport", "ReconciliationWorker", "Reconciler"]


@dataclass
class ReconciliationReport:
    """Outcome of one reconciliation pass."""

    removed: list[str] = field(default_factory=list)
    missing_blobs: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class Reconciler:
    """Purges tombstoned catalog rows together with their blobs."""

    def __init__(self, catalog: ArtworkCatalog, blobs: BlobStore) -> None:
        self.catalog = catalog
        self.blobs = blobs

    @property
    def session(self) -> Session:
        return self.catalog.session

    def run_once(self) -> ReconciliationReport:
        """Remove every soft-deleted artwork, one row at a time.

        Each row is deleted inside its own transaction, which stays open
        until the blob is gone. A concurrent attempt to restore the same
        artwork therefore either wins before the delete (and the row is
        skipped) or fails afterwards, never leaving a live row without an
        image. A missing blob is logged and treated as already cleaned.
        """
        report = ReconciliationReport()
        for artwork_id, image_format in self.catalog.list_tombstoned():
            try:
                removed = self.catalog.purge(artwork_id, only_deleted=True, commit=False)
                if not removed:
                    # Restored since it was listed.
                    self.session.rollback()
                    report.skipped.append(artwork_id)
                    continue
                if not self.blobs.delete(artwork_id, image_format):
                    logger.warning("image for artwork %s was already missing", artwork_id)
                    report.missing_blobs.append(artwork_id)
                self.session.commit()
            except (OSError, SQLAlchemyError) as exc:
                self.session.rollback()
                logger.error("couldn't reconcile artwork %s: %s", artwork_id, exc, exc_info=True)
                report.failed.append(artwork_id)
                continue
            report.removed.append(artwork_id)

        if report.removed or report.failed:
            logger.info(
                "reconciliation removed %d artworks (%d without image), %d failures",
                len(report.removed),
                len(report.missing_blobs),
                len(report.failed),
            )
        return report


class ReconciliationWorker:
    """Runs reconciliation at startup and then periodically in the background.

    Each pass opens its own session through ``session_factory`` and runs in a
    worker thread so the event loop keeps serving requests.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        blobs: BlobStore,
        interval_seconds: float,
    ) -> None:
        self.session_factory = session_factory
        self.blobs = blobs
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    def run_pass(self) -> ReconciliationReport:
        """Run a single reconciliation pass with a fresh session."""
        with self.session_factory() as session:
            return Reconciler(ArtworkCatalog(session), self.blobs).run_once()

    async def start(self) -> None:
        """Start the periodic loop; a non-positive interval disables it."""
        if self.interval_seconds <= 0:
            return

        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the periodic loop."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except TimeoutError:
                pass
            else:
                return

            try:
                await asyncio.to_thread(self.run_pass)
            except SQLAlchemyError as e:
                logger.error("ReconciliationWorker encountered database error: %s", e, exc_info=True)
            except Exception as e:  # noqa: BLE001
                logger.error("ReconciliationWorker pass failed: %s", e, exc_info=True)
