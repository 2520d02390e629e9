import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional, Set

from app.settings import settings


@dataclass(frozen=True)
class CachedPage:
    html: str
    status_code: int = 200
    rendered_at: float = 0.0
    revalidate: Optional[int] = None  # seconds; None means never stale

    def is_stale(self, now: float) -> bool:
        if self.revalidate is None:
            return False
        return now - self.rendered_at >= self.revalidate


class PageCache:
    """
    Rendered pages by path, plus the set of paths currently being rendered.
    Holds at most `max_pages` entries; the least recently used page is evicted first.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_pages: Optional[int] = None,
    ):
        self.clock = clock
        self.max_pages = max_pages
        self._pages: "OrderedDict[str, CachedPage]" = OrderedDict()
        self._in_flight: Set[str] = set()
        self._lock = threading.Lock()

    def get(self, path: str) -> Optional[CachedPage]:
        with self._lock:
            page = self._pages.get(path)
            if page is not None:
                self._pages.move_to_end(path)
            return page

    def store(
        self,
        path: str,
        html: str,
        status_code: int = 200,
        revalidate: Optional[int] = None,
    ) -> CachedPage:
        page = CachedPage(
            html=html,
            status_code=status_code,
            rendered_at=self.clock(),
            revalidate=revalidate,
        )
        with self._lock:
            self._pages[path] = page
            self._pages.move_to_end(path)
            if self.max_pages is not None:
                while len(self._pages) > self.max_pages:
                    self._pages.popitem(last=False)
        return page

    def is_stale(self, page: CachedPage) -> bool:
        return page.is_stale(self.clock())

    def claim(self, path: str) -> bool:
        """Mark path as being rendered. False when another render already holds it."""
        with self._lock:
            if path in self._in_flight:
                return False
            self._in_flight.add(path)
            return True

    def release(self, path: str) -> None:
        with self._lock:
            self._in_flight.discard(path)

    def is_rendering(self, path: str) -> bool:
        with self._lock:
            return path in self._in_flight

    def paths(self):
        with self._lock:
            return sorted(self._pages)

    def clear(self) -> None:
        with self._lock:
            self._pages.clear()
            self._in_flight.clear()


# Shared by the app process
page_cache = PageCache(max_pages=settings.PAGE_CACHE_MAX_PAGES)
