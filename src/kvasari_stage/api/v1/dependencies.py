"""Shared API dependencies for authentication and service wiring."""

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from kvasari_stage.core.security import decode_subject
from kvasari_stage.core.settings import Settings, settings
from kvasari_stage.db.session import get_db
from kvasari_stage.models import User
from kvasari_stage.services.blob_store import BlobStore
from kvasari_stage.services.catalog import ArtworkCatalog
from kvasari_stage.services.feedback import FeedbackStore
from kvasari_stage.services.identity import IdentityDirectory
from kvasari_stage.services.stream import FeedEngine
from kvasari_stage.services.upload import UploadPipeline

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_settings() -> Settings:
    """Return the process-wide settings."""
    return settings


SettingsDep = Annotated[Settings, Depends(get_settings)]


@lru_cache(maxsize=4)
def _blob_store_at(root: Path) -> BlobStore:
    return BlobStore(root)


def get_blob_store(config: SettingsDep) -> BlobStore:
    """Return the image store rooted at the configured images path."""
    return _blob_store_at(Path(config.images_path))


BlobStoreDep = Annotated[BlobStore, Depends(get_blob_store)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
    config: SettingsDep,
) -> User:
    """Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session
        config: Settings holding the signing secret

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: If token is invalid or user not found
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = decode_subject(credentials.credentials, config)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = IdentityDirectory(db).get_user(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def ensure_same_user(user: User, alias: str) -> None:
    """Reject requests addressing another user's resources by alias."""
    if user.alias != alias:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to act on behalf of another user",
        )


def get_feedback_store(db: SessionDep) -> FeedbackStore:
    return FeedbackStore(db)


FeedbackDep = Annotated[FeedbackStore, Depends(get_feedback_store)]


def get_catalog(db: SessionDep, feedback: FeedbackDep, config: SettingsDep) -> ArtworkCatalog:
    return ArtworkCatalog(db, feedback=feedback, page_size=config.stream_page_size)


CatalogDep = Annotated[ArtworkCatalog, Depends(get_catalog)]


def get_feed_engine(db: SessionDep, feedback: FeedbackDep, config: SettingsDep) -> FeedEngine:
    return FeedEngine(db, feedback=feedback, page_size=config.stream_page_size)


FeedDep = Annotated[FeedEngine, Depends(get_feed_engine)]


def get_upload_pipeline(
    catalog: CatalogDep,
    blobs: BlobStoreDep,
    config: SettingsDep,
) -> UploadPipeline:
    return UploadPipeline(catalog, blobs, max_upload_bytes=config.max_upload_bytes)


UploadDep = Annotated[UploadPipeline, Depends(get_upload_pipeline)]
