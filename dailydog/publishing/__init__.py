"""
Publishing: slugs, content, views, trending and article management
"""

from .slugs import slugify, allocate_slug, save_with_unique_slug, SlugConflictError
from .content import normalize_content
from .views import hash_client, record_view
from .trending import get_trending_articles
from .sitemap import build_sitemap, SitemapEntry
from .articles import (
    ArticleInput,
    ArticleNotFoundError,
    HomePage,
    normalize_topics,
    create_article,
    update_article,
    delete_article,
    get_published_by_slug,
    get_related,
    get_home_page,
)

__all__ = [
    "slugify",
    "allocate_slug",
    "save_with_unique_slug",
    "SlugConflictError",
    "normalize_content",
    "hash_client",
    "record_view",
    "get_trending_articles",
    "build_sitemap",
    "SitemapEntry",
    "ArticleInput",
    "ArticleNotFoundError",
    "HomePage",
    "normalize_topics",
    "create_article",
    "update_article",
    "delete_article",
    "get_published_by_slug",
    "get_related",
    "get_home_page",
]
