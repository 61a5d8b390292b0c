"""Unit tests for posts/service.py -- validation, ownership and listing rules."""

from unittest.mock import MagicMock

import pytest

from auth.models import Identity
from core.errors import (
    InvalidImageURLError,
    MissingFieldsError,
    NegativePriceError,
    PostNotFoundError,
    TooLongError,
    UnauthorizedError,
)
from posts.models import FilterParams, Post, PostDraft, PostPatch, SortParams
from posts.service import PostService
from posts.store import PostStore

ALICE = Identity("alice")
BOB = Identity("bob")


def _draft(title: str = "Bike", price: float = 120, **overrides) -> PostDraft:
    fields = {
        "title": title,
        "description": "A red bike",
        "price": price,
        "image_url": "https://img.example.com/bike.jpg",
    }
    fields.update(overrides)
    return PostDraft(**fields)


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class TestCreate:
    def test_owner_comes_from_identity(self, post_service: PostService, post_store: PostStore) -> None:
        post = post_service.create_post(_draft(), ALICE)
        assert post.id is not None
        assert post.owner == "alice"
        assert post.is_owner is True
        assert post.created_at
        assert post_store.get_by_id(post.id).owner == "alice"

    def test_zero_price_allowed(self, post_service: PostService) -> None:
        assert post_service.create_post(_draft(price=0), ALICE).price == 0

    def test_image_url_is_stored_trimmed(self, post_service: PostService, post_store: PostStore) -> None:
        post = post_service.create_post(_draft(image_url="  https://img.example.com/bike.jpg\n"), ALICE)
        assert post.image_url == "https://img.example.com/bike.jpg"
        assert post_store.get_by_id(post.id).image_url == "https://img.example.com/bike.jpg"

    @pytest.mark.parametrize(
        ("overrides", "error"),
        [
            ({"title": ""}, MissingFieldsError),
            ({"description": "   "}, MissingFieldsError),
            ({"title": "t" * 101}, TooLongError),
            ({"description": "d" * 2001}, TooLongError),
            ({"price": -1}, NegativePriceError),
            ({"image_url": "ftp://img.example.com/bike.jpg"}, InvalidImageURLError),
            ({"image_url": "https://img.example.com/bike.svg"}, InvalidImageURLError),
        ],
    )
    def test_invalid_content_is_not_stored(
        self, post_service: PostService, post_store: PostStore, overrides: dict, error: type
    ) -> None:
        with pytest.raises(error):
            post_service.create_post(_draft(**overrides), ALICE)
        assert post_store.query(SortParams(), FilterParams(min_price=0)) == []


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


@pytest.fixture
def listing(post_service: PostService) -> PostService:
    """Posts priced 50 (alice), 150 (bob), 15 (alice), in that order."""
    post_service.create_post(_draft("fifty", 50), ALICE)
    post_service.create_post(_draft("one-fifty", 150), BOB)
    post_service.create_post(_draft("fifteen", 15), ALICE)
    return post_service


class TestGetPosts:
    def test_defaults_newest_first(self, listing: PostService) -> None:
        posts = listing.get_posts()
        assert [p.title for p in posts] == ["fifteen", "one-fifty", "fifty"]

    def test_min_price(self, listing: PostService) -> None:
        posts = listing.get_posts(filter=FilterParams(min_price=100))
        assert [p.price for p in posts] == [150]

    def test_inverted_range_is_swapped(self, listing: PostService) -> None:
        posts = listing.get_posts(SortParams("price", "asc"), FilterParams(min_price=60, max_price=10))
        assert [p.price for p in posts] == [15, 50]

    def test_negative_bounds_are_ignored(self, listing: PostService) -> None:
        posts = listing.get_posts(SortParams("price", "desc"), FilterParams(min_price=-5, max_price=-1))
        assert [p.price for p in posts] == [150, 50, 15]

    def test_owner_filter(self, listing: PostService) -> None:
        posts = listing.get_posts(filter=FilterParams(owner="bob"))
        assert [p.title for p in posts] == ["one-fifty"]

    def test_unknown_sort_falls_back(self, listing: PostService) -> None:
        posts = listing.get_posts(SortParams("title", "sideways"))
        assert [p.title for p in posts] == ["fifteen", "one-fifty", "fifty"]

    def test_is_owner_for_viewer(self, listing: PostService) -> None:
        posts = listing.get_posts(viewer=ALICE)
        assert {p.title: p.is_owner for p in posts} == {"fifteen": True, "one-fifty": False, "fifty": True}

    def test_anonymous_never_owns(self, listing: PostService) -> None:
        assert not any(p.is_owner for p in listing.get_posts())

    def test_empty_login_never_owns(self, post_store: PostStore) -> None:
        post_store.create_post(Post("t", "d", 1, "https://img.example.com/a.png", owner=""))
        posts = PostService(post_store).get_posts(viewer=Identity(""))
        assert posts[0].is_owner is False

    def test_filter_is_normalized_before_store(self) -> None:
        store = MagicMock()
        store.query.return_value = []
        PostService(store).get_posts(filter=FilterParams(min_price=30, max_price=20, owner=""))
        _, passed_filter = store.query.call_args.args
        assert passed_filter == FilterParams(min_price=20, max_price=30, owner=None)


class TestGetPostById:
    def test_found(self, post_service: PostService) -> None:
        created = post_service.create_post(_draft(), ALICE)
        assert post_service.get_post_by_id(created.id, BOB).is_owner is False
        assert post_service.get_post_by_id(created.id, ALICE).is_owner is True

    def test_not_found(self, post_service: PostService) -> None:
        with pytest.raises(PostNotFoundError):
            post_service.get_post_by_id(404)

    def test_id_beyond_integer_range(self, post_service: PostService) -> None:
        with pytest.raises(PostNotFoundError):
            post_service.get_post_by_id(10**20)
        with pytest.raises(PostNotFoundError):
            post_service.delete_post(10**20, ALICE)


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------


class TestUpdate:
    def test_partial_update_keeps_other_fields(self, post_service: PostService) -> None:
        created = post_service.create_post(_draft(), ALICE)
        updated = post_service.update_post(created.id, PostPatch(price=99.5), ALICE)

        assert updated.price == 99.5
        assert updated.title == "Bike"
        assert updated.description == "A red bike"
        assert updated.owner == "alice"
        assert updated.created_at == created.created_at
        assert updated.is_owner is True
        assert post_service.get_post_by_id(created.id).price == 99.5

    def test_non_owner_is_refused(self, post_service: PostService) -> None:
        created = post_service.create_post(_draft(), ALICE)
        with pytest.raises(UnauthorizedError):
            post_service.update_post(created.id, PostPatch(title="Stolen"), BOB)
        assert post_service.get_post_by_id(created.id).title == "Bike"

    def test_invalid_merge_leaves_post_unchanged(self, post_service: PostService) -> None:
        created = post_service.create_post(_draft(), ALICE)
        with pytest.raises(NegativePriceError):
            post_service.update_post(created.id, PostPatch(title="New", price=-3), ALICE)
        stored = post_service.get_post_by_id(created.id)
        assert (stored.title, stored.price) == ("Bike", 120)

    def test_patched_image_url_is_trimmed(self, post_service: PostService) -> None:
        created = post_service.create_post(_draft(), ALICE)
        updated = post_service.update_post(created.id, PostPatch(image_url=" https://img.example.com/new.png "), ALICE)
        assert updated.image_url == "https://img.example.com/new.png"
        assert post_service.get_post_by_id(created.id).image_url == "https://img.example.com/new.png"

    def test_blank_title_rejected(self, post_service: PostService) -> None:
        created = post_service.create_post(_draft(), ALICE)
        with pytest.raises(MissingFieldsError):
            post_service.update_post(created.id, PostPatch(title="  "), ALICE)

    def test_missing(self, post_service: PostService) -> None:
        with pytest.raises(PostNotFoundError):
            post_service.update_post(7, PostPatch(title="x"), ALICE)

    def test_deleted_between_load_and_write(self) -> None:
        store = MagicMock()
        store.get_by_id.return_value = Post("t", "d", 1, "https://img.example.com/a.png", owner="alice", id=1)
        store.update_post.return_value = False
        with pytest.raises(PostNotFoundError):
            PostService(store).update_post(1, PostPatch(title="x"), ALICE)


class TestDelete:
    def test_owner_deletes(self, post_service: PostService) -> None:
        created = post_service.create_post(_draft(), ALICE)
        post_service.delete_post(created.id, ALICE)
        with pytest.raises(PostNotFoundError):
            post_service.get_post_by_id(created.id)

    def test_non_owner_is_refused(self, post_service: PostService) -> None:
        created = post_service.create_post(_draft(), ALICE)
        with pytest.raises(UnauthorizedError):
            post_service.delete_post(created.id, BOB)
        assert post_service.get_post_by_id(created.id).owner == "alice"

    def test_missing(self, post_service: PostService) -> None:
        with pytest.raises(PostNotFoundError):
            post_service.delete_post(7, ALICE)

    def test_store_not_written_on_refusal(self) -> None:
        store = MagicMock()
        store.get_by_id.return_value = Post("t", "d", 1, "https://img.example.com/a.png", owner="alice", id=1)
        with pytest.raises(UnauthorizedError):
            PostService(store).delete_post(1, BOB)
        store.delete_post.assert_not_called()


class TestFilterParsing:
    @pytest.mark.parametrize(
        ("raw_min", "raw_max", "expected"),
        [
            (None, None, FilterParams(min_price=0.0, max_price=None)),
            ("cheap", "lots", FilterParams(min_price=0.0, max_price=None)),
            ("10", "x", FilterParams(min_price=10.0, max_price=None)),
            ("nan", "inf", FilterParams(min_price=0.0, max_price=None)),
            (" 5 ", "20.5", FilterParams(min_price=5.0, max_price=20.5)),
            ("-3", "-1", FilterParams(min_price=0.0, max_price=None)),
            ("20", "10", FilterParams(min_price=10.0, max_price=20.0)),
        ],
    )
    def test_unparseable_bounds_fall_back_to_defaults(self, raw_min, raw_max, expected: FilterParams) -> None:
        assert FilterParams.parse(raw_min, raw_max).normalized() == expected

    def test_owner_passes_through(self) -> None:
        assert FilterParams.parse(owner="bob").owner == "bob"
