"""
doccrud: generic CRUD repositories for MongoDB with the active transaction session
carried through contextvars.
"""

from doccrud.exceptions.handler import NotFoundError
from doccrud.repository import (
    BaseEntity,
    CrudRepository,
    Pagination,
    PaginationResult,
    QueryOptions,
    TransactionService,
)

__all__ = [
    "BaseEntity",
    "CrudRepository",
    "NotFoundError",
    "Pagination",
    "PaginationResult",
    "QueryOptions",
    "TransactionService",
]
