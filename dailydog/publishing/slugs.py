"""
URL slug derivation and allocation
"""

import logging
import re
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database.models import Article
from ..database.repository import ArticleRepository

logger = logging.getLogger(__name__)

DEFAULT_SLUG = "article"
MAX_SAVE_ATTEMPTS = 5

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


class SlugConflictError(Exception):
    """No free slug could be written after repeated constraint violations"""


def slugify(title: str) -> str:
    """Derive a URL-safe slug from a title"""
    slug = _NON_SLUG_CHARS.sub("-", (title or "").lower()).strip("-")
    return slug or DEFAULT_SLUG


def allocate_slug(session: Session, base_slug: str, exclude_id: Optional[int] = None) -> str:
    """
    Find a slug not held by any other article

    Tries ``base_slug`` then ``base_slug-1``, ``base_slug-2``, ... The article
    ``exclude_id`` (the one being edited) never counts as a holder, so an
    unchanged title keeps its slug.
    """
    slug = base_slug
    counter = 1
    while ArticleRepository.slug_taken(session, slug, exclude_id):
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug


def save_with_unique_slug(
    session: Session,
    article: Article,
    base_slug: str,
    values: Optional[dict] = None
) -> Article:
    """
    Write ``article`` under a unique slug derived from ``base_slug``

    Probing is only a pre-check: the unique constraint on ``articles.slug`` is
    authoritative. A violation raised by a concurrent writer rolls back the
    savepoint and the next free suffix is tried. ``values`` are assigned
    inside the savepoint so they survive the rollback of a failed attempt.
    """
    for attempt in range(1, MAX_SAVE_ATTEMPTS + 1):
        slug = allocate_slug(session, base_slug, exclude_id=article.id)
        try:
            with session.begin_nested():
                for field, value in (values or {}).items():
                    setattr(article, field, value)
                article.slug = slug
                session.add(article)
                session.flush()
            return article
        except IntegrityError:
            logger.warning(
                "Slug '%s' taken concurrently (attempt %d/%d)",
                slug, attempt, MAX_SAVE_ATTEMPTS
            )

    raise SlugConflictError(f"Could not allocate a unique slug for '{base_slug}'")
