from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field
from doccrud.repository import BaseEntity

class ArticleStatus(str, Enum):
    """Article lifecycle."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"

class Article(BaseEntity):
    __collection__ = "articles"

class ArticleAudit(BaseEntity):
    """One entry per bulk transition, written in the same transaction as the change."""
    __collection__ = "article_audit"

class ArticleCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    author: str = Field(min_length=1, max_length=100)
    body: str = ""
    tags: List[str] = Field(default_factory=list)

class ArticleUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    body: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[ArticleStatus] = None
