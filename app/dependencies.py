from typing import Callable

from fastapi import Depends

from app.clients.prismic import PrismicClient
from app.rendering import PageRenderer
from app.services.page_cache import PageCache, page_cache
from app.services.posts_service import PostsService
from app.settings import Settings, settings


def get_settings() -> Settings:
    """Small wrapper to allow dependency overrides in tests."""
    return settings


def get_client_factory(
    current_settings: Settings = Depends(get_settings),
) -> Callable[[], PrismicClient]:
    """
    Background renders outlive the request, so they build their own client
    from this factory instead of sharing the request-scoped one.
    """
    return lambda: PrismicClient.from_settings(current_settings)


def get_content_client(factory=Depends(get_client_factory)):
    client = factory()
    try:
        yield client
    finally:
        client.close()


def get_posts_service(
    client=Depends(get_content_client),
    current_settings: Settings = Depends(get_settings),
) -> PostsService:
    return PostsService(client, current_settings)


def get_renderer(current_settings: Settings = Depends(get_settings)) -> PageRenderer:
    return PageRenderer(current_settings)


def get_page_cache() -> PageCache:
    return page_cache
