import pytest

from app.errors import ContentServiceError
from app.schemas.blog import PostDetail, PostPagination
from app.services.posts_service import PostsService
from app.settings import Settings
from tests.conftest import FakePrismicClient, make_detail_doc, make_doc


def make_service(client, **overrides):
    return PostsService(client, Settings(**overrides))


def test_home_pagination_fetches_first_page_only():
    client = FakePrismicClient(
        first_page={"next_page": "https://x/page2", "results": [make_doc("p1"), make_doc("p2")]}
    )

    pagination = make_service(client).get_home_pagination()

    assert isinstance(pagination, PostPagination)
    assert [p.uid for p in pagination.results] == ["p1"]
    assert pagination.next_page == "https://x/page2"
    assert client.calls == [
        ("get_by_type", "posts", ("posts.title", "posts.subtitle", "posts.author"), 1)
    ]


def test_home_pagination_uses_configured_type_and_page_size():
    client = FakePrismicClient(first_page={"results": [make_doc("p1")]})

    make_service(client, POSTS_DOCUMENT_TYPE="articles", HOME_PAGE_SIZE=5).get_home_pagination()

    assert client.calls[0] == (
        "get_by_type",
        "articles",
        ("articles.title", "articles.subtitle", "articles.author"),
        5,
    )


def test_home_pagination_results_are_mapped():
    client = FakePrismicClient(first_page={"results": [make_doc("p1")]})

    post = make_service(client).get_home_pagination().results[0]

    assert set(post.model_dump()["data"]) == {"title", "subtitle", "author"}


def test_fetch_next_page_maps_cursor_results():
    client = FakePrismicClient(
        pages={"https://x/page2": {"next_page": None, "results": [make_doc("p2")]}}
    )

    pagination = make_service(client).fetch_next_page("https://x/page2")

    assert [p.uid for p in pagination.results] == ["p2"]
    assert pagination.next_page is None
    assert client.calls == [("get_page", "https://x/page2")]


def test_prebuilt_slugs_use_small_page_and_skip_missing_uids():
    docs = [make_doc("a"), {**make_doc("b"), "uid": None}, make_doc("c")]
    client = FakePrismicClient(first_page={"results": docs})

    slugs = make_service(client, PREBUILT_POSTS_PAGE_SIZE=3).get_prebuilt_slugs()

    assert slugs == ["a", "c"]
    assert client.calls == [("get_by_type", "posts", ("posts.slug",), 3)]


def test_prebuilt_slugs_default_page_size_is_two():
    client = FakePrismicClient(first_page={"results": [make_doc(u) for u in "abc"]})

    assert make_service(client).get_prebuilt_slugs() == ["a", "b"]


def test_get_post_returns_detail():
    client = FakePrismicClient(docs={"hello": make_detail_doc("hello")})

    post = make_service(client).get_post("hello")

    assert isinstance(post, PostDetail)
    assert post.uid == "hello"
    assert post.data.content[0].heading == "Proin et varius"


def test_get_post_returns_none_when_missing(caplog):
    client = FakePrismicClient()

    with caplog.at_level("INFO"):
        assert make_service(client).get_post("nope") is None
    assert any("No post found for slug nope" in rec.message for rec in caplog.records)


def test_get_post_propagates_service_errors():
    client = FakePrismicClient(error=ContentServiceError("down", status_code=503))

    with pytest.raises(ContentServiceError):
        make_service(client).get_post("hello")
