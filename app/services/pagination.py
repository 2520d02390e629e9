import enum
import logging
import threading
from typing import Callable, Iterable, List, Optional

from app.errors import LoadInProgressError
from app.schemas.blog import Post, PostPagination
from app.services.mapper import map_to_post

logger = logging.getLogger(__name__)


class ListingState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"


class PostListing:
    """
    Listing page state: the posts shown so far plus the cursor to the next page.

    Only one page is fetched at a time. A failed fetch leaves posts and cursor
    untouched so the caller can retry.
    """

    def __init__(
        self,
        results: Iterable[Post],
        next_page: Optional[str],
        fetch_page: Callable[[str], PostPagination],
        *,
        dedupe: bool = False,
    ):
        self.fetch_page = fetch_page
        self.dedupe = dedupe
        self.last_error: Optional[Exception] = None
        self._posts: List[Post] = list(results)
        self._next_page = next_page or None
        self._state = ListingState.IDLE
        self._lock = threading.Lock()

    @classmethod
    def from_pagination(
        cls, pagination: PostPagination, fetch_page, **kwargs
    ) -> "PostListing":
        return cls(pagination.results, pagination.next_page, fetch_page, **kwargs)

    @property
    def posts(self) -> List[Post]:
        return list(self._posts)

    @property
    def next_page(self) -> Optional[str]:
        return self._next_page

    @property
    def state(self) -> ListingState:
        return self._state

    @property
    def can_load_more(self) -> bool:
        return bool(self._next_page) and self._state is ListingState.IDLE

    def load_more(self) -> List[Post]:
        """Fetch the next page and append it. Returns the newly appended posts."""
        if not self._lock.acquire(blocking=False):
            raise LoadInProgressError("A page is already being loaded")
        try:
            cursor = self._next_page
            if not cursor:
                return []
            self._state = ListingState.LOADING
            try:
                page = self.fetch_page(cursor)
            except Exception as e:
                self.last_error = e
                logger.warning(f"Loading more posts failed: {e}")
                raise

            new_posts = [map_to_post(post) for post in page.results]
            if self.dedupe:
                new_posts = dedupe_posts(self._posts, new_posts)
            self._posts = self._posts + new_posts
            self._next_page = page.next_page or None
            self.last_error = None
            logger.debug(
                f"Appended {len(new_posts)} posts, more pages: {bool(self._next_page)}"
            )
            return new_posts
        finally:
            self._state = ListingState.IDLE
            self._lock.release()

    def load_all(self) -> List[Post]:
        followed = set()
        while self._next_page and self._next_page not in followed:
            followed.add(self._next_page)
            self.load_more()
        if self._next_page:
            logger.warning(f"Stopped at repeated cursor {self._next_page}")
        return self.posts


def dedupe_posts(existing: Iterable[Post], incoming: Iterable[Post]) -> List[Post]:
    """Drop incoming posts whose uid is already listed (or repeated within the page)."""
    seen = {post.uid for post in existing if post.uid}
    unique = []
    for post in incoming:
        if post.uid and post.uid in seen:
            continue
        if post.uid:
            seen.add(post.uid)
        unique.append(post)
    return unique
