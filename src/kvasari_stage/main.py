# src/kvasari_stage/main.py
"""Main entry point for the Kvasari application."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from kvasari_stage.api.v1 import artworks_router, stream_router
from kvasari_stage.core.settings import settings
from kvasari_stage.db.session import SessionLocal, create_tables
from kvasari_stage.services.blob_store import BlobStore
from kvasari_stage.services.reconciliation import ReconciliationWorker

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Kvasari API",
    description="Artwork sharing gallery API",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(artworks_router, prefix="/api/v1")
app.include_router(stream_router, prefix="/api/v1")


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.on_event("startup")
async def on_startup() -> None:
    _configure_logging()
    create_tables()

    worker = ReconciliationWorker(
        SessionLocal,
        BlobStore(Path(settings.images_path)),
        settings.reconcile_interval_seconds,
    )
    if settings.reconcile_on_startup:
        report = await asyncio.to_thread(worker.run_pass)
        logger.info("startup reconciliation removed %d artworks", len(report.removed))
    await worker.start()
    app.state.reconciliation_worker = worker


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: ReconciliationWorker | None = getattr(app.state, "reconciliation_worker", None)
    if worker:
        await worker.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Artwork sharing gallery API",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("kvasari_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
