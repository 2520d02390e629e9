import json
import logging
from typing import Any, Dict, Iterable, Optional, Sequence
from urllib.parse import urlsplit

import httpx
from pydantic import BaseModel, ValidationError

from app.errors import (
    ContentServiceError,
    DocumentNotFoundError,
    InvalidCursorError,
    MalformedResponseError,
)
from app.schemas.prismic import ApiInfo, RawDocument, SearchResponse
from app.settings import Settings

logger = logging.getLogger(__name__)


def at(path: str, value: Any) -> str:
    """Build an `at` predicate, e.g. ``[at(document.type, "posts")]``."""
    return f"[at({path}, {_format_value(value)})]"


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_format_value(v) for v in value) + "]"
    return str(value)


class PrismicClient:
    """
    Handle on a Prismic repository.
    The master ref is looked up once per client and reused for every query.
    """

    def __init__(
        self,
        api_endpoint: str,
        access_token: str | None = None,
        *,
        http_client: httpx.Client | None = None,
        timeout: float = 10.0,
    ):
        self.api_endpoint = api_endpoint.rstrip("/")
        self.access_token = access_token or None
        self.http = http_client or httpx.Client(timeout=timeout)
        self._owns_http = http_client is None
        self._ref: Optional[str] = None

    @classmethod
    def from_settings(cls, settings_obj: Settings, **kwargs) -> "PrismicClient":
        return cls(
            settings_obj.PRISMIC_API_ENDPOINT,
            settings_obj.PRISMIC_ACCESS_TOKEN,
            timeout=settings_obj.PRISMIC_TIMEOUT_SECONDS,
            **kwargs,
        )

    @property
    def host(self) -> str:
        return urlsplit(self.api_endpoint).netloc

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "PrismicClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_master_ref(self) -> str:
        if self._ref is None:
            info = self._get_json(self.api_endpoint, self._auth_params(), ApiInfo)
            if not info.master_ref:
                raise MalformedResponseError("Repository did not report a master ref")
            self._ref = info.master_ref
            logger.debug(f"Using Prismic master ref {self._ref}")
        return self._ref

    def query(
        self,
        predicates: Sequence[str] = (),
        *,
        fetch: Iterable[str] = (),
        page_size: int | None = None,
        page: int | None = None,
        orderings: str | None = None,
    ) -> SearchResponse:
        params: Dict[str, Any] = {"ref": self.get_master_ref()}
        if predicates:
            params["q"] = "[" + "".join(predicates) + "]"
        fetch = list(fetch)
        if fetch:
            params["fetch"] = ",".join(fetch)
        if page_size is not None:
            params["pageSize"] = page_size
        if page is not None:
            params["page"] = page
        if orderings:
            params["orderings"] = orderings
        params.update(self._auth_params())

        url = f"{self.api_endpoint}/documents/search"
        return self._get_json(url, params, SearchResponse)

    def get_by_type(
        self,
        document_type: str,
        *,
        predicates: Sequence[str] = (),
        fetch: Iterable[str] = (),
        page_size: int | None = None,
        page: int | None = None,
    ) -> SearchResponse:
        return self.query(
            [at("document.type", document_type), *predicates],
            fetch=fetch,
            page_size=page_size,
            page=page,
        )

    def get_by_uid(
        self, document_type: str, uid: str, *, fetch: Iterable[str] = ()
    ) -> RawDocument:
        response = self.query(
            [at("document.type", document_type), at(f"my.{document_type}.uid", uid)],
            fetch=fetch,
            page_size=1,
        )
        if not response.results:
            raise DocumentNotFoundError(document_type, uid)
        return response.results[0]

    def get_page(self, url: str) -> SearchResponse:
        """Fetch a page by the cursor URL the API handed out, verbatim."""
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or parts.netloc != self.host:
            raise InvalidCursorError(f"Refusing to follow cursor outside {self.host}")
        return self._get_json(url, None, SearchResponse)

    def _auth_params(self) -> Dict[str, str]:
        return {"access_token": self.access_token} if self.access_token else {}

    def _get_json(self, url: str, params, model: type[BaseModel]):
        try:
            response = self.http.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Content service answered {status} for {url}")
            raise ContentServiceError(
                f"Content service answered {status}", status_code=status
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Content service request failed: {e}")
            raise ContentServiceError(f"Content service unreachable: {e}") from e

        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise MalformedResponseError(f"Unexpected payload from {url}: {e}") from e
