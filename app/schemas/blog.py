from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PostData(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    subtitle: Optional[str] = None
    author: Optional[str] = None


class Post(BaseModel):
    model_config = ConfigDict(frozen=True)

    uid: Optional[str] = None
    first_publication_date: Optional[str] = None
    data: PostData = Field(default_factory=PostData)


class Banner(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: Optional[str] = None


class ContentBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    heading: Optional[str] = None
    body: List[Dict[str, Any]] = Field(default_factory=list)


class PostDetailData(PostData):
    banner: Optional[Banner] = None
    content: Optional[List[ContentBlock]] = None


class PostDetail(Post):
    data: PostDetailData = Field(default_factory=PostDetailData)


class PostPagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    next_page: Optional[str] = None
    results: List[Post] = Field(default_factory=list)
