from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from doccrud.logging.logger import get_logger
from doccrud.repository import Pagination, PaginationResult, QueryOptions, TransactionService
from .models import ArticleCreate, ArticleStatus, ArticleUpdate
from .repository import ArticleAuditRepository, ArticleRepository

logger = get_logger("article_service")

ARTICLE_NOT_FOUND = "Article not found"


class ArticleService:
    """Article use cases on top of the generic repositories."""

    def __init__(
        self,
        articles: ArticleRepository,
        audit: ArticleAuditRepository,
        transactions: TransactionService,
    ):
        self.articles = articles
        self.audit = audit
        self.transactions = transactions

    async def get_article(self, article_id: str) -> Dict[str, Any]:
        """Get article or raise NotFoundError."""
        return await self.articles.find_one(
            article_id,
            QueryOptions(throw_on_empty=True, error_message=ARTICLE_NOT_FOUND),
        )

    async def list_articles(
        self,
        page: int = 1,
        limit: int = 20,
        author: Optional[str] = None,
        status: Optional[ArticleStatus] = None,
    ) -> PaginationResult:
        """List articles newest first, paginated, optionally filtered."""
        filter: Dict[str, Any] = {}
        if author:
            filter["author"] = author
        if status:
            filter["status"] = status.value

        return await self.articles.find_many(
            filter,
            QueryOptions(pagination=Pagination(page=page, limit=limit), sort=[("created_at", -1)]),
        )

    async def create_article(self, payload: ArticleCreate) -> Dict[str, Any]:
        article = await self.articles.create({
            **payload.model_dump(),
            "status": ArticleStatus.DRAFT.value,
            "created_at": datetime.now(timezone.utc),
        })
        logger.info(f"Article {article['_id']} created by {payload.author}")
        return article

    async def update_article(self, article_id: str, payload: ArticleUpdate) -> Dict[str, Any]:
        changes = payload.model_dump(exclude_unset=True, mode="json")
        if not changes:
            return await self.get_article(article_id)

        changes["updated_at"] = datetime.now(timezone.utc)
        return await self.articles.update_one(
            article_id,
            {"$set": changes},
            QueryOptions(throw_on_empty=True, error_message=ARTICLE_NOT_FOUND),
        )

    async def delete_article(self, article_id: str) -> Dict[str, Any]:
        """Delete article; returns it as it was before deletion."""
        return await self.articles.delete_one(
            article_id,
            QueryOptions(throw_on_empty=True, error_message=ARTICLE_NOT_FOUND),
        )

    async def publish_drafts(self, author: str) -> List[Dict[str, Any]]:
        """Publish every draft of an author; empty list when there is none."""
        return await self.articles.update_many(
            {"author": author, "status": ArticleStatus.DRAFT.value},
            {"$set": {"status": ArticleStatus.PUBLISHED.value, "published_at": datetime.now(timezone.utc)}},
        )

    async def archive_author(self, author: str) -> List[Dict[str, Any]]:
        """Archive all of an author's articles and record it, atomically."""

        async def unit(session) -> List[Dict[str, Any]]:
            archived = await self.articles.update_many(
                {"author": author},
                {"$set": {"status": ArticleStatus.ARCHIVED.value}},
                QueryOptions(throw_on_empty=True, error_message=f"No articles for author {author}"),
            )
            await self.audit.create({
                "action": "archive_author",
                "author": author,
                "article_ids": [article["_id"] for article in archived],
                "at": datetime.now(timezone.utc),
            })
            return archived

        archived = await self.transactions.run(unit)
        logger.info(f"Archived {len(archived)} article(s) of {author}")
        return archived

    async def status_summary(self) -> Dict[str, int]:
        rows = await self.articles.count_by_status()
        return {row["_id"]: row["count"] for row in rows}
