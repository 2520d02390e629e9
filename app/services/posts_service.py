import logging
from typing import List, Optional

from app.errors import DocumentNotFoundError
from app.schemas.blog import PostDetail, PostPagination
from app.services.mapper import map_results, map_to_post_detail
from app.settings import Settings, settings

logger = logging.getLogger(__name__)


class PostsService:
    def __init__(self, client, settings_obj: Settings = settings):
        self.client = client
        self.settings = settings_obj

    @property
    def document_type(self) -> str:
        return self.settings.POSTS_DOCUMENT_TYPE

    def get_home_pagination(self) -> PostPagination:
        """First page of posts, as pre-rendered on the listing page."""
        doc_type = self.document_type
        response = self.client.get_by_type(
            doc_type,
            fetch=[f"{doc_type}.title", f"{doc_type}.subtitle", f"{doc_type}.author"],
            page_size=self.settings.HOME_PAGE_SIZE,
        )
        logger.info(
            f"Fetched {len(response.results)} {doc_type} for the listing "
            f"(more pages: {bool(response.next_page)})"
        )
        return PostPagination(
            next_page=response.next_page, results=map_results(response.results)
        )

    def fetch_next_page(self, cursor: str) -> PostPagination:
        response = self.client.get_page(cursor)
        return PostPagination(
            next_page=response.next_page, results=map_results(response.results)
        )

    def get_prebuilt_slugs(self) -> List[str]:
        doc_type = self.document_type
        response = self.client.get_by_type(
            doc_type,
            fetch=[f"{doc_type}.slug"],
            page_size=self.settings.PREBUILT_POSTS_PAGE_SIZE,
        )
        return [doc.uid for doc in response.results if doc.uid]

    def get_post(self, slug: str) -> Optional[PostDetail]:
        try:
            doc = self.client.get_by_uid(self.document_type, slug)
        except DocumentNotFoundError:
            logger.info(f"No post found for slug {slug}")
            return None
        return map_to_post_detail(doc)
