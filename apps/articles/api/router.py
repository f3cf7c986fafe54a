from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional
from doccrud.config import settings
from doccrud.database.manager import DatabaseManager
from doccrud.repository import TransactionService
from doccrud.response import ResponseModel
from ..models import ArticleCreate, ArticleStatus, ArticleUpdate
from ..repository import ArticleAuditRepository, ArticleRepository
from ..service import ArticleService

router = APIRouter()

def get_database() -> AsyncIOMotorDatabase:
    """Get Mongo database handle."""
    return DatabaseManager.get_instance().mongo.get_database()

def get_transaction_service() -> TransactionService:
    """Dependency: create TransactionService."""
    return TransactionService(DatabaseManager.get_instance().mongo.get_client())

def get_article_service(
    database: AsyncIOMotorDatabase = Depends(get_database),
    transactions: TransactionService = Depends(get_transaction_service),
) -> ArticleService:
    """Dependency: create ArticleService."""
    return ArticleService(
        ArticleRepository(database),
        ArticleAuditRepository(database),
        transactions,
    )

@router.get("")
async def list_articles(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=100),
    author: Optional[str] = None,
    status: Optional[ArticleStatus] = None,
    service: ArticleService = Depends(get_article_service),
):
    """List articles (newest first, paginated)."""
    result = await service.list_articles(page=page, limit=limit, author=author, status=status)
    return ResponseModel.success(data=result.model_dump())

@router.get("/stats")
async def article_stats(service: ArticleService = Depends(get_article_service)):
    """Article count per status."""
    return ResponseModel.success(data=await service.status_summary())

@router.post("")
async def create_article(
    payload: ArticleCreate,
    service: ArticleService = Depends(get_article_service),
):
    article = await service.create_article(payload)
    return ResponseModel.success(data=article)

@router.get("/{article_id}")
async def get_article(
    article_id: str,
    service: ArticleService = Depends(get_article_service),
):
    """Get article detail; 404 when missing."""
    return ResponseModel.success(data=await service.get_article(article_id))

@router.patch("/{article_id}")
async def update_article(
    article_id: str,
    payload: ArticleUpdate,
    service: ArticleService = Depends(get_article_service),
):
    return ResponseModel.success(data=await service.update_article(article_id, payload))

@router.delete("/{article_id}")
async def delete_article(
    article_id: str,
    service: ArticleService = Depends(get_article_service),
):
    """Delete article; responds with the deleted document."""
    return ResponseModel.success(data=await service.delete_article(article_id))

@router.post("/authors/{author}/publish")
async def publish_drafts(
    author: str,
    service: ArticleService = Depends(get_article_service),
):
    return ResponseModel.success(data=await service.publish_drafts(author))

@router.post("/authors/{author}/archive")
async def archive_author(
    author: str,
    service: ArticleService = Depends(get_article_service),
):
    """Archive every article of an author in one transaction."""
    return ResponseModel.success(data=await service.archive_author(author))
