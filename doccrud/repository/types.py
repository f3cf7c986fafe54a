"""
Shared types for the CRUD contract: query options, pagination, entity marker.
"""

import re
from typing import Any, ClassVar, Dict, Generic, List, Mapping, Optional, Tuple, TypeVar, Union
from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

Document = Dict[str, Any]
Filter = Mapping[str, Any]
FilterOrId = Union[Filter, ObjectId, str, bytes]

T = TypeVar("T")


class BaseEntity:
    """Marker for a stored entity type; subclasses name their collection."""

    __collection__: ClassVar[Optional[str]] = None

    @classmethod
    def collection_name(cls) -> str:
        if cls.__collection__:
            return cls.__collection__
        # ArticleRevision -> article_revisions
        snake = re.sub(r"(?<!^)(?=[A-Z])", "_", cls.__name__).lower()
        return f"{snake}s"


class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: Optional[int] = Field(default=None, ge=1)
    limit: Optional[int] = Field(default=None, ge=0)


class QueryOptions(BaseModel):
    """Per-call options; throw_on_empty turns an empty result into NotFoundError."""
    model_config = ConfigDict(frozen=True)

    throw_on_empty: bool = False
    error_message: Optional[str] = None
    error_translation_path: Optional[str] = None
    pagination: Optional[Pagination] = None
    # Passed through to the driver for find-style queries
    sort: Optional[List[Tuple[str, int]]] = None
    projection: Optional[Union[Dict[str, Any], List[str]]] = None


class PaginationResult(BaseModel, Generic[T]):
    data: List[T]
    total: int
    total_pages: int
    current_page: int


DEFAULT_OPTIONS = QueryOptions()
