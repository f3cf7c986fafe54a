"""
Result policy shared by every CRUD operation: existence checks and pagination arithmetic.
"""

import math
from typing import Any, List, Optional
from doccrud.exceptions.handler import NotFoundError
from .types import Pagination, PaginationResult, QueryOptions


def is_empty(result: Any) -> bool:
    """Empty sequences and falsy single results both count as not found."""
    if isinstance(result, (list, tuple)):
        return len(result) == 0
    return not result


def check_existence(result: Any, options: QueryOptions) -> None:
    """Raise NotFoundError for an empty result when the caller opted in."""
    if options.throw_on_empty and is_empty(result):
        raise NotFoundError(options.error_message, translation_path=options.error_translation_path)


def skip_and_limit(pagination: Pagination) -> Optional[tuple]:
    """(skip, limit) for the query, or None when page or limit is missing."""
    if pagination.page and pagination.limit:
        return (pagination.page - 1) * pagination.limit, pagination.limit
    return None


def paginate(data: List[Any], total: int, pagination: Pagination) -> PaginationResult:
    limit = pagination.limit or 0
    return PaginationResult(
        data=data,
        total=total,
        total_pages=math.ceil(total / limit) if limit > 0 else 1,
        current_page=pagination.page if pagination.page else 1,
    )
