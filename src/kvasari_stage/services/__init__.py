# src/kvasari_stage/services/__init__.py
"""Business logic services for the Kvasari application."""

from .blob_store import BlobStore
from .catalog import ArtworkCatalog
from .feedback import FeedbackStore
from .identity import IdentityDirectory
from .reconciliation import Reconciler, ReconciliationWorker
from .stream import FeedEngine
from .upload import UploadPipeline

__all__ = [
    "ArtworkCatalog",
    "BlobStore",
    "FeedEngine",
    "FeedbackStore",
    "IdentityDirectory",
    "Reconciler",
    "ReconciliationWorker",
    "UploadPipeline",
]
