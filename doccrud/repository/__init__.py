"""
Repository pattern: generic document CRUD plus ambient transaction handling.
"""

from .base import CrudRepository, ICrudRepository
from .policy import check_existence, paginate
from .transaction import TransactionService
from .types import DEFAULT_OPTIONS, BaseEntity, Document, Pagination, PaginationResult, QueryOptions

__all__ = [
    "BaseEntity",
    "CrudRepository",
    "DEFAULT_OPTIONS",
    "Document",
    "ICrudRepository",
    "Pagination",
    "PaginationResult",
    "QueryOptions",
    "TransactionService",
    "check_existence",
    "paginate",
]
