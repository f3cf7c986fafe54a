"""
Entity registration: import every stored entity here so collection names are in one place.
"""
from apps.articles.models import Article, ArticleAudit

__all__ = ["Article", "ArticleAudit"]

COLLECTIONS = [entity.collection_name() for entity in (Article, ArticleAudit)]
