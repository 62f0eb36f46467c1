"""
Trending article ranking by recent view count
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ..database.models import Article
from ..database.repository import ArticleRepository, ViewRepository

logger = logging.getLogger(__name__)

DEFAULT_TRENDING_LIMIT = 6
DEFAULT_TRENDING_WINDOW = timedelta(hours=24)


def get_trending_articles(
    session: Session,
    limit: int = DEFAULT_TRENDING_LIMIT,
    window: timedelta = DEFAULT_TRENDING_WINDOW,
    topic: Optional[str] = None,
    now: Optional[datetime] = None
) -> list[Article]:
    """
    Most viewed articles within the trailing window

    Args:
        session: DB session
        limit: number of top view groups to consider
        window: trailing interval counted back from ``now``
        topic: optional topic filter applied after ranking
        now: reference time (defaults to current UTC time)

    Returns:
        Articles ordered by in-window view count, descending. Articles in the
        top groups that the topic filter drops are not backfilled, so fewer
        than ``limit`` may be returned.
    """
    since = (now or datetime.utcnow()) - window
    ranked = ViewRepository.top_articles_since(session, since, limit)
    if not ranked:
        return []

    counts = dict(ranked)
    articles = ArticleRepository.get_published_by_ids(session, list(counts), topic)

    # The fetch does not preserve rank order
    return sorted(articles, key=lambda a: (-counts.get(a.id, 0), a.id))
