# tests/test_catalog.py
"""Tests for the artwork catalog."""

import pytest
from sqlalchemy import func, select

from factories import at
from kvasari_stage.models import Comment, ImageFormat, Reaction, ReactionKind
from kvasari_stage.services.errors import (
    ArtworkNotFoundError,
    NotModifiedError,
    UserNotFoundError,
)


def test_get_artwork_returns_detail(catalog, feedback, alice, bob, make_artwork) -> None:
    artwork = make_artwork(alice, at(1), title="Water Lilies")
    feedback.add_comment(bob.id, artwork.id, "Such calm and gentle colours")
    feedback.set_reaction(bob.id, artwork.id, ReactionKind.LIKE)

    detail = catalog.get_artwork(artwork.id, bob.id)

    assert detail.id == artwork.id
    assert detail.title == "Water Lilies"
    assert detail.author_alias == "alice"
    assert detail.format is ImageFormat.PNG
    assert detail.added == at(1)
    assert detail.comments == 1
    assert detail.reactions == 1
    assert detail.user_reaction is ReactionKind.LIKE


def test_get_artwork_hides_deleted(catalog, alice, make_artwork) -> None:
    artwork = make_artwork(alice, at(1), deleted=True)

    with pytest.raises(ArtworkNotFoundError):
        catalog.get_artwork(artwork.id, alice.id)


def test_get_artwork_unknown_id(catalog, alice) -> None:
    with pytest.raises(ArtworkNotFoundError):
        catalog.get_artwork("0" * 64, alice.id)


@pytest.mark.parametrize("author_bans", [True, False])
def test_get_artwork_hidden_by_ban(catalog, alice, bob, ban, make_artwork, author_bans) -> None:
    artwork = make_artwork(alice, at(1))
    if author_bans:
        ban(alice, bob)
    else:
        ban(bob, alice)

    with pytest.raises(ArtworkNotFoundError):
        catalog.get_artwork(artwork.id, bob.id)
    with pytest.raises(ArtworkNotFoundError):
        catalog.get_image_format(artwork.id, bob.id)


def test_get_image_format(catalog, alice, make_artwork) -> None:
    artwork = make_artwork(alice, at(1), image_format=ImageFormat.WEBP)

    assert catalog.get_image_format(artwork.id, alice.id) is ImageFormat.WEBP


def test_delete_artwork_sets_tombstone(catalog, alice, make_artwork) -> None:
    artwork = make_artwork(alice, at(1))

    catalog.delete_artwork(artwork.id, alice.id)

    row = catalog.find(artwork.id)
    assert row.deleted is True
    assert row.added == at(1)
    assert catalog.list_tombstoned() == [(artwork.id, ImageFormat.PNG)]


def test_delete_artwork_requires_ownership(catalog, alice, bob, make_artwork) -> None:
    artwork = make_artwork(alice, at(1))

    with pytest.raises(ArtworkNotFoundError):
        catalog.delete_artwork(artwork.id, bob.id)

    assert catalog.find(artwork.id).deleted is False


def test_delete_artwork_twice(catalog, alice, make_artwork) -> None:
    artwork = make_artwork(alice, at(1))
    catalog.delete_artwork(artwork.id, alice.id)

    with pytest.raises(ArtworkNotFoundError):
        catalog.delete_artwork(artwork.id, alice.id)


def test_set_title(catalog, alice, make_artwork) -> None:
    artwork = make_artwork(alice, at(1), title="Untitled")

    updated = catalog.set_title(artwork.id, alice.id, "Starry Night")

    row = catalog.find(artwork.id)
    assert row.title == "Starry Night"
    assert row.updated == updated
    assert row.added == at(1)


def test_set_title_on_foreign_or_deleted_artwork(catalog, alice, bob, make_artwork) -> None:
    artwork = make_artwork(alice, at(1))
    deleted = make_artwork(alice, at(2), deleted=True)

    with pytest.raises(NotModifiedError):
        catalog.set_title(artwork.id, bob.id, "Stolen")
    with pytest.raises(NotModifiedError):
        catalog.set_title(deleted.id, alice.id, "Too late")


def test_list_author_artworks(catalog, alice, bob, make_artwork) -> None:
    first = make_artwork(alice, at(1))
    second = make_artwork(alice, at(2))
    gone = make_artwork(alice, at(3), deleted=True)
    make_artwork(bob, at(2))

    listing = catalog.list_author_artworks("alice", bob.id, since=at(10), latest=at(10))

    assert [preview.id for preview in listing.artworks] == [second.id, first.id]
    assert listing.total == 2

    window = catalog.list_author_artworks("alice", bob.id, since=at(10), latest=at(0))
    assert [preview.id for preview in window.new_artworks] == [second.id, first.id]
    assert window.deleted_ids == [gone.id]
    assert [preview.id for preview in window.artworks] == [second.id, first.id]

    out_of_order = catalog.list_author_artworks("alice", bob.id, since=at(5), latest=at(10))
    assert out_of_order.artworks == []
    assert out_of_order.total == 2


def test_list_author_artworks_does_not_require_following(catalog, alice, carol, make_artwork) -> None:
    make_artwork(alice, at(1))

    listing = catalog.list_author_artworks("alice", carol.id, since=at(10), latest=at(10))

    assert listing.total == 1


def test_list_author_artworks_unknown_or_banned(catalog, alice, bob, ban) -> None:
    with pytest.raises(UserNotFoundError):
        catalog.list_author_artworks("nobody", alice.id, since=at(1), latest=at(1))

    ban(alice, bob)
    with pytest.raises(UserNotFoundError):
        catalog.list_author_artworks("alice", bob.id, since=at(1), latest=at(1))
    with pytest.raises(UserNotFoundError):
        catalog.list_author_artworks("bobby", alice.id, since=at(1), latest=at(1))


def test_purge_only_touches_tombstones(catalog, feedback, alice, bob, make_artwork) -> None:
    live = make_artwork(alice, at(1))
    feedback.add_comment(bob.id, live.id, "Keep this one around please")

    assert catalog.purge(live.id) is False
    assert catalog.find(live.id) is not None
    assert len(feedback.list_comments(live.id, bob.id)) == 1


def test_purge_cascades_to_feedback(catalog, feedback, db_session, alice, bob, make_artwork) -> None:
    artwork = make_artwork(alice, at(1))
    feedback.add_comment(bob.id, artwork.id, "Soon to be gone forever")
    feedback.set_reaction(bob.id, artwork.id, ReactionKind.PERPLEXED)
    catalog.delete_artwork(artwork.id, alice.id)

    assert catalog.purge(artwork.id) is True

    assert catalog.find(artwork.id) is None
    assert db_session.scalar(select(func.count()).select_from(Comment)) == 0
    assert db_session.scalar(select(func.count()).select_from(Reaction)) == 0
