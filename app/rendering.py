from functools import lru_cache
from pathlib import Path
from urllib.parse import urlencode

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.schemas.blog import PostDetail, PostPagination
from app.services.rich_text import as_html
from app.settings import Settings, settings
from app.utils import estimate_reading_time, format_publication_date, format_reading_time


TEMPLATES_DIR = Path(__file__).parent / "templates"
STATIC_DIR = Path(__file__).parent / "static"


@lru_cache(maxsize=1)
def build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["publication_date"] = format_publication_date
    env.filters["rich_text"] = as_html
    return env


class PageRenderer:
    def __init__(self, settings_obj: Settings = settings, env: Environment | None = None):
        self.settings = settings_obj
        self.env = env or build_environment()

    def _render(self, template_name: str, **context) -> str:
        template = self.env.get_template(template_name)
        return template.render(site_title=self.settings.SITE_TITLE, **context)

    def _page_context(self, pagination: PostPagination, more_url: str | None) -> dict:
        next_page = pagination.next_page
        if next_page and not more_url:
            more_url = "/posts/more?" + urlencode({"cursor": next_page})
        return {"posts": pagination.results, "next_page": next_page, "more_url": more_url}

    def render_home(self, pagination: PostPagination, more_url: str | None = None) -> str:
        """
        `more_url` is where the load-more control fetches the next items from;
        by default the server route for the pagination cursor.
        """
        return self._render("index.html", **self._page_context(pagination, more_url))

    def render_more(self, pagination: PostPagination, more_url: str | None = None) -> str:
        """Items of a follow-up page plus the control for the page after it."""
        return self._render("_post_page.html", **self._page_context(pagination, more_url))

    def render_post(self, post: PostDetail) -> str:
        minutes = estimate_reading_time(
            post.data.content, words_per_minute=self.settings.WORDS_PER_MINUTE
        )
        return self._render(
            "post.html", post=post, reading_time=format_reading_time(minutes)
        )

    def render_loading(self) -> str:
        return self._render("loading.html")

    def render_not_found(self, slug: str) -> str:
        return self._render("not_found.html", slug=slug)
