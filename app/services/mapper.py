from typing import Any, Dict, Iterable, List, Union

from pydantic import BaseModel

from app.schemas.blog import Post, PostDetail
from app.schemas.prismic import RawDocument

Document = Union[RawDocument, BaseModel, Dict[str, Any]]


def map_to_post(doc: Document) -> Post:
    """Project a document onto the listing shape, dropping every other field."""
    raw = _as_dict(doc)
    data = raw.get("data") or {}
    return Post(
        uid=raw.get("uid"),
        first_publication_date=raw.get("first_publication_date"),
        data={
            "title": data.get("title"),
            "subtitle": data.get("subtitle"),
            "author": data.get("author"),
        },
    )


def map_to_post_detail(doc: Document) -> PostDetail:
    raw = _as_dict(doc)
    data = raw.get("data") or {}
    banner = data.get("banner")
    content = data.get("content")
    return PostDetail(
        uid=raw.get("uid"),
        first_publication_date=raw.get("first_publication_date"),
        data={
            "title": data.get("title"),
            "subtitle": data.get("subtitle"),
            "author": data.get("author"),
            "banner": {"url": banner.get("url")} if banner else None,
            "content": (
                [
                    {"heading": block.get("heading"), "body": block.get("body") or []}
                    for block in content
                ]
                if content is not None
                else None
            ),
        },
    )


def map_results(docs: Iterable[Document]) -> List[Post]:
    return [map_to_post(doc) for doc in docs]


def _as_dict(doc: Document) -> Dict[str, Any]:
    if isinstance(doc, BaseModel):
        return doc.model_dump()
    return doc or {}
