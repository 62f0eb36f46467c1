"""
Article create/update/delete and public listings
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..database.models import Article
from ..database.repository import ArticleRepository, ViewRepository
from .slugs import slugify, save_with_unique_slug
from .trending import get_trending_articles

logger = logging.getLogger(__name__)

FEATURED_LIMIT = 4
LATEST_LIMIT = 12
RELATED_LIMIT = 3


class ArticleNotFoundError(Exception):
    """No article with the given id"""


@dataclass
class ArticleInput:
    """Editable article fields, as submitted by the admin form or JSON API"""
    title: str
    excerpt: str = ""
    content: str = ""
    slug: Optional[str] = None
    image_url: Optional[str] = None
    source_text: Optional[str] = None
    source_image_url: Optional[str] = None
    topics: list[str] = field(default_factory=list)
    is_featured: bool = False
    publish: bool = False

    @property
    def base_slug(self) -> str:
        return slugify(self.slug or self.title)


@dataclass
class HomePage:
    featured: list[Article]
    latest: list[Article]
    trending: list[Article]

    @property
    def hero(self) -> Optional[Article]:
        if self.featured:
            return self.featured[0]
        return self.latest[0] if self.latest else None

    @property
    def sub_featured(self) -> list[Article]:
        return self.featured[1:] if self.featured else self.latest[1:4]


def normalize_topics(topics: Any = None, topic: Any = None) -> list[str]:
    """
    A list of topic names wins (blank entries dropped); otherwise a single
    ``topic`` value becomes a one-item list.
    """
    if isinstance(topics, list):
        names = [t.strip() for t in topics if isinstance(t, str) and t.strip()]
    elif topic and str(topic).strip():
        names = [str(topic).strip()]
    else:
        names = []
    return list(dict.fromkeys(names))


def _field_values(data: ArticleInput) -> dict:
    return {
        "title": data.title,
        "excerpt": data.excerpt,
        "content": data.content,
        "image_url": data.image_url or None,
        "source_text": data.source_text or None,
        "source_image_url": data.source_image_url or None,
        "topics": normalize_topics(data.topics),
        "is_featured": bool(data.is_featured),
    }


def create_article(session: Session, data: ArticleInput, author_id: Optional[int]) -> Article:
    """Create an article; published immediately when ``data.publish`` is set"""
    article = Article(
        author_id=author_id,
        published_at=datetime.utcnow() if data.publish else None,
    )
    save_with_unique_slug(session, article, data.base_slug, values=_field_values(data))
    logger.info("Article created: id=%s slug=%s", article.id, article.slug)
    return article


def update_article(
    session: Session,
    article_id: int,
    data: ArticleInput,
    author_id: Optional[int]
) -> Article:
    """
    Update an article in place

    Publishing is one-way: ``publish`` sets ``published_at`` on a draft, and
    an already published article keeps its original timestamp.
    """
    article = ArticleRepository.get_by_id(session, article_id)
    if article is None:
        raise ArticleNotFoundError(f"Article {article_id} not found")

    values = _field_values(data)
    values["author_id"] = author_id
    if data.publish and article.published_at is None:
        values["published_at"] = datetime.utcnow()

    save_with_unique_slug(session, article, data.base_slug, values=values)
    logger.info("Article updated: id=%s slug=%s", article.id, article.slug)
    return article


def delete_article(session: Session, article_id: int) -> None:
    """Delete an article and, first, its views"""
    article = ArticleRepository.get_by_id(session, article_id)
    if article is None:
        raise ArticleNotFoundError(f"Article {article_id} not found")

    removed = ViewRepository.delete_for_article(session, article_id)
    ArticleRepository.delete(session, article)
    logger.info("Article deleted: id=%s (%d views removed)", article_id, removed)


def get_published_by_slug(session: Session, slug: str) -> Optional[Article]:
    """Published article for a slug; drafts are treated as missing"""
    article = ArticleRepository.get_by_slug(session, slug)
    if article is None or article.published_at is None:
        return None
    return article


def get_related(session: Session, article: Article, limit: int = RELATED_LIMIT) -> list[Article]:
    return ArticleRepository.list_published(session, exclude_id=article.id, limit=limit)


def get_home_page(session: Session, topic: Optional[str] = None) -> HomePage:
    return HomePage(
        featured=ArticleRepository.list_published(
            session, topic=topic, featured_only=True, limit=FEATURED_LIMIT
        ),
        latest=ArticleRepository.list_published(session, topic=topic, limit=LATEST_LIMIT),
        trending=get_trending_articles(session, topic=topic),
    )
