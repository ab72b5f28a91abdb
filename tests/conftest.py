# tests/conftest.py
from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Iterator
from datetime import datetime
from pathlib import Path

import pytest

# Keep the application's own startup away from the working directory.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("IMAGES_PATH", tempfile.mkdtemp(prefix="kvasari-test-images-"))
os.environ.setdefault("RECONCILE_ON_STARTUP", "false")
os.environ.setdefault("RECONCILE_INTERVAL_SECONDS", "0")

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from kvasari_stage.api.v1.dependencies import get_blob_store, get_settings
from kvasari_stage.core.settings import Settings
from kvasari_stage.db.session import Base, build_engine
from kvasari_stage.db.session import get_db as app_get_session
from kvasari_stage.main import app as fastapi_app
from kvasari_stage.models import Artwork, ArtworkType, Ban, Follow, ImageFormat, User
from kvasari_stage.services.blob_store import BlobStore
from kvasari_stage.services.catalog import ArtworkCatalog
from kvasari_stage.services.feedback import FeedbackStore
from kvasari_stage.services.stream import FeedEngine
from kvasari_stage.services.upload import UploadPipeline
from kvasari_stage.utils.hash import content_hexdigest

from factories import auth_headers, png_bytes

TEST_DB_URL = "sqlite://"
TEST_MAX_UPLOAD_BYTES = 64 * 1024


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = build_engine(Settings(), url=TEST_DB_URL, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    # Services commit and roll back on their own, so every test gets a fresh database.
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        IMAGES_PATH=tmp_path / "images",
        MAX_UPLOAD_BYTES=TEST_MAX_UPLOAD_BYTES,
        STREAM_PAGE_SIZE=12,
        RECONCILE_ON_STARTUP=False,
        RECONCILE_INTERVAL_SECONDS=0,
    )


@pytest.fixture()
def blob_store(test_settings: Settings) -> BlobStore:
    return BlobStore(test_settings.images_path)


@pytest.fixture()
def feedback(db_session: Session) -> FeedbackStore:
    return FeedbackStore(db_session)


@pytest.fixture()
def catalog(db_session: Session, feedback: FeedbackStore) -> ArtworkCatalog:
    return ArtworkCatalog(db_session, feedback=feedback)


@pytest.fixture()
def feed(db_session: Session, feedback: FeedbackStore) -> FeedEngine:
    return FeedEngine(db_session, feedback=feedback)


@pytest.fixture()
def pipeline(catalog: ArtworkCatalog, blob_store: BlobStore) -> UploadPipeline:
    return UploadPipeline(catalog, blob_store, max_upload_bytes=TEST_MAX_UPLOAD_BYTES)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    test_settings: Settings,
    blob_store: BlobStore,
) -> Iterator[None]:
    def _get_session_override() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


# Users and relations


def _make_user(db_session: Session, alias: str, name: str) -> User:
    user = User(alias=alias, name=name)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture()
def alice(db_session: Session) -> User:
    return _make_user(db_session, "alice", "Alice Liddell")


@pytest.fixture()
def bob(db_session: Session) -> User:
    return _make_user(db_session, "bobby", "Bob Ross")


@pytest.fixture()
def carol(db_session: Session) -> User:
    return _make_user(db_session, "carol", "Carol Danvers")


@pytest.fixture()
def follow(db_session: Session) -> Callable[[User, User], None]:
    """Return a helper making the first user follow the second."""

    def _follow(follower: User, target: User) -> None:
        db_session.add(Follow(follower_id=follower.id, target_id=target.id))
        db_session.commit()

    return _follow


@pytest.fixture()
def ban(db_session: Session) -> Callable[[User, User], None]:
    """Return a helper making the first user ban the second."""

    def _ban(source: User, target: User) -> None:
        db_session.add(Ban(source_id=source.id, target_id=target.id))
        db_session.commit()

    return _ban


@pytest.fixture()
def alice_auth(alice: User) -> dict[str, str]:
    return auth_headers(alice)


@pytest.fixture()
def bob_auth(bob: User) -> dict[str, str]:
    return auth_headers(bob)


# Images and artworks


@pytest.fixture()
def make_artwork(db_session: Session) -> Callable[..., Artwork]:
    """Return a helper inserting an artwork row with an explicit ``added`` date."""

    def _make(
        author: User,
        added: datetime,
        *,
        deleted: bool = False,
        title: str | None = None,
        image_format: ImageFormat = ImageFormat.PNG,
    ) -> Artwork:
        data = png_bytes()
        artwork = Artwork(
            id=content_hexdigest(data),
            author_id=author.id,
            type=ArtworkType.PAINTING,
            format=image_format,
            title=title,
            added=added,
            updated=added,
            deleted=deleted,
        )
        db_session.add(artwork)
        db_session.commit()
        db_session.refresh(artwork)
        return artwork

    return _make
