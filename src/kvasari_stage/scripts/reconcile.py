# src/kvasari_stage/scripts/reconcile.py
"""Run a single reconciliation pass over soft-deleted artworks."""
from __future__ import annotations

import logging
import sys
from pathlib import Path

from kvasari_stage.core.settings import settings
from kvasari_stage.db.session import SessionLocal
from kvasari_stage.services.blob_store import BlobStore
from kvasari_stage.services.reconciliation import ReconciliationWorker


def main() -> int:
    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
    worker = ReconciliationWorker(
        SessionLocal,
        BlobStore(Path(settings.images_path)),
        settings.reconcile_interval_seconds,
    )
    report = worker.run_pass()
    print(
        f"Removed {len(report.removed)} artworks "
        f"({len(report.missing_blobs)} without image), {len(report.failed)} failures"
    )
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
