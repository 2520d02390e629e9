import logging
import shutil
from pathlib import Path
from typing import Dict

from app.errors import DocumentNotFoundError
from app.rendering import STATIC_DIR, PageRenderer
from app.schemas.blog import PostPagination
from app.services.page_cache import PageCache
from app.services.pagination import dedupe_posts
from app.services.posts_service import PostsService

logger = logging.getLogger(__name__)

HOME_PATH = "/"


def post_path(slug: str) -> str:
    return f"/post/{slug}"


def listing_page_path(number: int) -> str:
    return f"/posts/page/{number}"


def render_home(service: PostsService, renderer: PageRenderer) -> str:
    return renderer.render_home(service.get_home_pagination())


def render_listing_pages(service: PostsService, renderer: PageRenderer) -> Dict[str, str]:
    """
    The listing plus every follow-up page as a load-more fragment, so the
    exported site paginates without the server. Page n lives at /posts/page/n/.
    """
    pages = [service.get_home_pagination()]
    listed = list(pages[0].results)
    visited = set()
    cursor = pages[0].next_page
    while cursor:
        if cursor in visited:
            logger.warning(f"Stopped at repeated cursor {cursor}")
            pages[-1] = pages[-1].model_copy(update={"next_page": None})
            break
        visited.add(cursor)
        page = service.fetch_next_page(cursor)
        if service.settings.DEDUPE_PAGINATED_POSTS:
            page = PostPagination(
                next_page=page.next_page, results=dedupe_posts(listed, page.results)
            )
        listed.extend(page.results)
        pages.append(page)
        cursor = page.next_page

    rendered = {}
    for number, page in enumerate(pages, start=1):
        more_url = f"{listing_page_path(number + 1)}/" if page.next_page else None
        if number == 1:
            rendered[HOME_PATH] = renderer.render_home(page, more_url=more_url)
        else:
            rendered[listing_page_path(number)] = renderer.render_more(page, more_url=more_url)
    logger.info(f"Rendered {len(pages)} listing pages")
    return rendered


def render_site(
    service: PostsService, renderer: PageRenderer, export: bool = False
) -> Dict[str, str]:
    """
    Render every page known at build time.
    With `export`, the listing's follow-up pages are rendered too, for hosting
    the output without the server.
    Any fetch failure propagates: a partial build is never produced.
    """
    if export:
        pages = render_listing_pages(service, renderer)
    else:
        pages = {HOME_PATH: render_home(service, renderer)}

    slugs = service.get_prebuilt_slugs()
    logger.info(f"Pre-rendering {len(slugs)} posts: {', '.join(slugs)}")
    for slug in slugs:
        post = service.get_post(slug)
        if post is None:
            raise DocumentNotFoundError(service.document_type, slug)
        pages[post_path(slug)] = renderer.render_post(post)
    return pages


def output_file_for(path: str, output_dir: Path) -> Path:
    relative = path.strip("/")
    return output_dir / relative / "index.html" if relative else output_dir / "index.html"


def write_site(pages: Dict[str, str], output_dir: Path) -> list[Path]:
    output_dir = Path(output_dir)
    written = []
    for path, html in pages.items():
        target = output_file_for(path, output_dir)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(html, encoding="utf-8")
        written.append(target)

    shutil.copytree(STATIC_DIR, output_dir / "static", dirs_exist_ok=True)
    logger.info(f"Wrote {len(written)} pages to {output_dir}")
    return written


def prerender_into_cache(
    service: PostsService,
    renderer: PageRenderer,
    cache: PageCache,
    post_revalidate: int | None = None,
) -> list[str]:
    pages = render_site(service, renderer)
    for path, html in pages.items():
        revalidate = None if path == HOME_PATH else post_revalidate
        cache.store(path, html, revalidate=revalidate)
    return list(pages)
