from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RawDocument(BaseModel):
    """A document as returned by the Prismic search API."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    uid: Optional[str] = None
    type: Optional[str] = None
    first_publication_date: Optional[str] = None
    last_publication_date: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class SearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    page: int = 1
    results_per_page: Optional[int] = None
    total_results_size: Optional[int] = None
    total_pages: Optional[int] = None
    next_page: Optional[str] = None
    prev_page: Optional[str] = None
    results: List[RawDocument] = Field(default_factory=list)


class Ref(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    ref: str
    label: Optional[str] = None
    isMasterRef: bool = False


class ApiInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    refs: List[Ref]

    @property
    def master_ref(self) -> Optional[str]:
        return next((r.ref for r in self.refs if r.isMasterRef), None)
