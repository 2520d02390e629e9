import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.staticfiles import StaticFiles

from app.build import prerender_into_cache
from app.clients.prismic import PrismicClient
from app.rendering import STATIC_DIR, PageRenderer
from app.routers import pages
from app.services.page_cache import page_cache
from app.services.posts_service import PostsService
from app.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="spacetraveling", description="Blog pages rendered from Prismic")


def prerender_pages() -> list[str]:
    with PrismicClient.from_settings(settings) as client:
        return prerender_into_cache(
            PostsService(client, settings),
            PageRenderer(settings),
            page_cache,
            post_revalidate=settings.POST_REVALIDATE_SECONDS,
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.PRERENDER_ON_STARTUP:
        paths = await run_in_threadpool(prerender_pages)
        logger.info(f"Pre-rendered {len(paths)} pages")

    try:
        yield
    finally:
        page_cache.clear()
        logger.info("Page cache cleared")


app.router.lifespan_context = lifespan

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
app.include_router(pages.router)
