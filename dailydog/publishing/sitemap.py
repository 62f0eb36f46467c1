"""
Sitemap entries for search engines
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..database.repository import ArticleRepository


@dataclass
class SitemapEntry:
    url: str
    last_modified: datetime
    change_frequency: str
    priority: float


def build_sitemap(session: Session, site_url: str, now: Optional[datetime] = None) -> list[SitemapEntry]:
    """Home page, admin entry point and every published article"""
    now = now or datetime.utcnow()
    base = site_url.rstrip("/")

    entries = [
        SitemapEntry(url=base, last_modified=now, change_frequency="daily", priority=1.0),
        SitemapEntry(url=f"{base}/admin", last_modified=now, change_frequency="monthly", priority=0.3),
    ]
    for article in ArticleRepository.list_all_published(session):
        entries.append(SitemapEntry(
            url=f"{base}/article/{article.slug}",
            last_modified=article.updated_at or article.published_at,
            change_frequency="weekly",
            priority=0.8,
        ))
    return entries
