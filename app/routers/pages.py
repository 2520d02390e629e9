import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse

from app import dependencies as deps
from app.build import HOME_PATH, post_path, render_home
from app.errors import ContentServiceError, InvalidCursorError
from app.rendering import PageRenderer
from app.schemas.blog import Post, PostPagination
from app.services.page_cache import PageCache
from app.services.pagination import dedupe_posts
from app.services.posts_service import PostsService
from app.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()

NO_STORE = {"Cache-Control": "no-store"}


@router.get("/", response_class=HTMLResponse)
def home(
    client_factory=Depends(deps.get_client_factory),
    renderer: PageRenderer = Depends(deps.get_renderer),
    cache: PageCache = Depends(deps.get_page_cache),
    current_settings: Settings = Depends(deps.get_settings),
):
    """
    Listing page, rendered once and then served from the cache.
    A content client is only opened on a cache miss.
    """
    cached = cache.get(HOME_PATH)
    if cached:
        return HTMLResponse(cached.html, status_code=cached.status_code)

    try:
        with client_factory() as client:
            html = render_home(PostsService(client, current_settings), renderer)
    except Exception as e:
        logger.error(f"Unexpected error rendering the listing: {e}")
        raise HTTPException(status_code=500, detail="Failed to render posts")
    cache.store(HOME_PATH, html)
    return HTMLResponse(html)


@router.get("/posts/more", response_class=HTMLResponse)
def load_more_posts(
    cursor: str = Query(..., min_length=1),
    seen: List[str] = Query(default=[]),
    service: PostsService = Depends(deps.get_posts_service),
    renderer: PageRenderer = Depends(deps.get_renderer),
    current_settings: Settings = Depends(deps.get_settings),
):
    """Next page of the listing as an HTML fragment, for the load-more control."""
    try:
        page = service.fetch_next_page(cursor)
    except InvalidCursorError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ContentServiceError as e:
        logger.warning(f"Failed to load more posts from {cursor}: {e}")
        raise HTTPException(status_code=502, detail="Failed to load more posts")

    if current_settings.DEDUPE_PAGINATED_POSTS and seen:
        page = PostPagination(
            next_page=page.next_page,
            results=dedupe_posts([Post(uid=uid) for uid in seen], page.results),
        )
    return HTMLResponse(renderer.render_more(page), headers=NO_STORE)


@router.get("/post/{slug}", response_class=HTMLResponse)
def post_detail(
    slug: str,
    background_tasks: BackgroundTasks,
    client_factory=Depends(deps.get_client_factory),
    renderer: PageRenderer = Depends(deps.get_renderer),
    cache: PageCache = Depends(deps.get_page_cache),
    current_settings: Settings = Depends(deps.get_settings),
):
    """
    Serve a post page from the cache.
    Unknown slugs get the loading placeholder while the page renders in the
    background; stale pages are served as-is while they refresh.
    """
    path = post_path(slug)
    cached = cache.get(path)

    if cached is None or cache.is_stale(cached):
        if cache.claim(path):
            background_tasks.add_task(
                regenerate_post,
                slug,
                client_factory=client_factory,
                renderer=renderer,
                cache=cache,
                settings_obj=current_settings,
            )

    if cached is None:
        return HTMLResponse(renderer.render_loading(), headers=NO_STORE)
    return HTMLResponse(cached.html, status_code=cached.status_code)


def regenerate_post(
    slug: str,
    *,
    client_factory,
    renderer: PageRenderer,
    cache: PageCache,
    settings_obj: Settings,
) -> None:
    """Render a post page into the cache. Failures leave the cache untouched."""
    path = post_path(slug)
    try:
        with client_factory() as client:
            post = PostsService(client, settings_obj).get_post(slug)
        if post is None:
            cache.store(
                path,
                renderer.render_not_found(slug),
                status_code=404,
                revalidate=settings_obj.POST_REVALIDATE_SECONDS,
            )
        else:
            cache.store(
                path,
                renderer.render_post(post),
                revalidate=settings_obj.POST_REVALIDATE_SECONDS,
            )
            logger.info(f"Rendered {path}")
    except Exception as e:
        logger.error(f"Failed to render {path}: {e}")
    finally:
        cache.release(path)
