"""Articles module repository implementations."""

from typing import Any, Dict, List
from doccrud.repository import CrudRepository, DEFAULT_OPTIONS, QueryOptions
from .models import Article, ArticleAudit


class ArticleRepository(CrudRepository[Article]):
    """Article repository."""

    def __init__(self, database):
        super().__init__(database, Article)

    async def get_by_author(self, author: str, options: QueryOptions = DEFAULT_OPTIONS):
        """Find all articles by author."""
        return await self.find_many({"author": author}, options)

    async def count_by_status(self) -> List[Dict[str, Any]]:
        """Number of articles per status."""
        return await self.aggregation([
            {"$group": {"_id": "$status", "count": {"$sum": 1}}},
            {"$sort": {"_id": 1}},
        ])


class ArticleAuditRepository(CrudRepository[ArticleAudit]):
    """Audit trail repository."""

    def __init__(self, database):
        super().__init__(database, ArticleAudit)
