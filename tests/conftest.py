import pytest

from app.errors import ContentServiceError, DocumentNotFoundError
from app.schemas.prismic import RawDocument, SearchResponse
from app.services.page_cache import page_cache


def make_doc(uid: str, title: str | None = None, **data) -> dict:
    """Raw Prismic document with the fields the blog reads plus some noise."""
    return {
        "id": f"id-{uid}",
        "uid": uid,
        "type": "posts",
        "href": f"https://spacetraveling.cdn.prismic.io/api/v2/documents/search?q={uid}",
        "tags": ["noise"],
        "first_publication_date": "2021-03-15T19:25:28+0000",
        "last_publication_date": "2021-03-16T10:00:00+0000",
        "lang": "pt-br",
        "data": {
            "title": title or uid.replace("-", " ").title(),
            "subtitle": f"Sobre {uid}",
            "author": "Joseph Oliveira",
            "slug": uid,
            **data,
        },
    }


def make_detail_doc(uid: str, content=None, banner_url="https://images.prismic.io/banner.png"):
    return make_doc(
        uid,
        banner={"url": banner_url, "alt": None, "dimensions": {"width": 1, "height": 1}},
        content=content
        if content is not None
        else [
            {
                "heading": "Proin et varius",
                "body": [{"type": "paragraph", "text": "one two three", "spans": []}],
            }
        ],
    )


class FakePrismicClient:
    """
    In-memory stand-in for PrismicClient.
    `pages` maps cursor URLs to search responses; `first_page` answers get_by_type.
    """

    def __init__(self, first_page=None, pages=None, docs=None, error=None):
        self.first_page = SearchResponse.model_validate(first_page or {"results": []})
        self.pages = {
            url: SearchResponse.model_validate(page) for url, page in (pages or {}).items()
        }
        self.docs = docs or {}
        self.error = error
        self.calls = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self.closed = True

    def get_by_type(self, document_type, *, predicates=(), fetch=(), page_size=None, page=None):
        self.calls.append(("get_by_type", document_type, tuple(fetch), page_size))
        if self.error:
            raise self.error
        results = self.first_page.results
        if page_size is not None:
            results = results[:page_size]
        return SearchResponse(next_page=self.first_page.next_page, results=results)

    def get_by_uid(self, document_type, uid, *, fetch=()):
        self.calls.append(("get_by_uid", document_type, uid))
        if self.error:
            raise self.error
        if uid not in self.docs:
            raise DocumentNotFoundError(document_type, uid)
        return RawDocument.model_validate(self.docs[uid])

    def get_page(self, url):
        self.calls.append(("get_page", url))
        if self.error:
            raise self.error
        if url not in self.pages:
            raise ContentServiceError(f"unknown cursor {url}", status_code=404)
        return self.pages[url]


class FakePostsService:
    """
    Minimal posts service stand-in for the load-more route.
    """

    def __init__(self, next_pages=None, error=None):
        self.next_pages = next_pages or {}
        self.error = error
        self.calls = []

    def fetch_next_page(self, cursor):
        self.calls.append(cursor)
        if self.error:
            raise self.error
        return self.next_pages[cursor]


@pytest.fixture(autouse=True)
def clear_page_cache():
    page_cache.clear()
    yield
    page_cache.clear()
