"""
Database repository layer
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional
from contextlib import contextmanager

from sqlalchemy import create_engine, event, func
from sqlalchemy.orm import sessionmaker, Session, joinedload

from .models import Base, Article, ArticleTopic, View, User, UserRole, Subscription

logger = logging.getLogger(__name__)

# Database engine and session factory
_engine = None
_SessionLocal = None


def create_db_engine(database_url: str, **kwargs):
    """
    Engine for ``database_url``

    SQLite connections enforce foreign keys and emit their own BEGIN so that
    SAVEPOINT rollbacks (slug retries, subscription races) stay inside the
    outer transaction.
    """
    is_sqlite = database_url.startswith("sqlite")
    engine = create_engine(
        database_url,
        echo=False,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        **kwargs
    )

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _configure_sqlite(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _emit_begin(conn):
            conn.exec_driver_sql("BEGIN")

    return engine


def init_db(database_url: str = "sqlite:///./data/dailydog.db") -> None:
    """Initialize the database"""
    global _engine, _SessionLocal

    # Create the data directory
    if database_url.startswith("sqlite:///") and database_url != "sqlite:///:memory:":
        db_path = database_url.replace("sqlite:///", "")
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    _engine = create_db_engine(database_url)
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)

    # Create tables
    Base.metadata.create_all(bind=_engine)
    logger.info("Database initialized: %s", database_url)


@contextmanager
def get_session():
    """Session context manager"""
    if _SessionLocal is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    session = _SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def _published(query, topic: Optional[str] = None):
    query = query.filter(Article.published_at.isnot(None))
    if topic:
        query = query.filter(Article.topic_links.any(ArticleTopic.name == topic))
    return query


class ArticleRepository:
    """Article store"""

    @staticmethod
    def get_by_id(session: Session, article_id: int) -> Optional[Article]:
        return session.query(Article).filter(Article.id == article_id).first()

    @staticmethod
    def get_by_slug(session: Session, slug: str) -> Optional[Article]:
        return (
            session.query(Article)
            .options(joinedload(Article.author))
            .filter(Article.slug == slug)
            .first()
        )

    @staticmethod
    def slug_taken(session: Session, slug: str, exclude_id: Optional[int] = None) -> bool:
        """Whether any article other than ``exclude_id`` holds ``slug``"""
        query = session.query(Article.id).filter(Article.slug == slug)
        if exclude_id is not None:
            query = query.filter(Article.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def list_published(
        session: Session,
        topic: Optional[str] = None,
        featured_only: bool = False,
        exclude_id: Optional[int] = None,
        limit: int = 12
    ) -> list[Article]:
        """Published articles, newest first"""
        query = _published(session.query(Article), topic)
        if featured_only:
            query = query.filter(Article.is_featured == True)
        if exclude_id is not None:
            query = query.filter(Article.id != exclude_id)
        return query.order_by(Article.published_at.desc()).limit(limit).all()

    @staticmethod
    def get_published_by_ids(
        session: Session,
        article_ids: list[int],
        topic: Optional[str] = None
    ) -> list[Article]:
        """Published articles among ``article_ids`` (order not preserved)"""
        if not article_ids:
            return []
        query = _published(session.query(Article), topic)
        return query.filter(Article.id.in_(article_ids)).all()

    @staticmethod
    def list_all_published(session: Session) -> list[Article]:
        return _published(session.query(Article)).order_by(Article.published_at.desc()).all()

    @staticmethod
    def list_with_view_counts(session: Session) -> list[tuple[Article, int]]:
        """All articles, drafts included, with their total view counts"""
        view_counts = (
            session.query(View.article_id, func.count(View.id).label("view_count"))
            .group_by(View.article_id)
            .subquery()
        )
        rows = (
            session.query(Article, func.coalesce(view_counts.c.view_count, 0))
            .outerjoin(view_counts, view_counts.c.article_id == Article.id)
            .order_by(Article.created_at.desc())
            .all()
        )
        return [(article, count) for article, count in rows]

    @staticmethod
    def delete(session: Session, article: Article) -> None:
        session.delete(article)
        session.flush()


class ViewRepository:
    """Page view store"""

    @staticmethod
    def create(session: Session, article_id: int, ip_hash: str, user_agent: str) -> View:
        view = View(article_id=article_id, ip_hash=ip_hash, user_agent=user_agent)
        session.add(view)
        session.flush()
        return view

    @staticmethod
    def delete_for_article(session: Session, article_id: int) -> int:
        """Delete all views of an article, returning the number removed"""
        return (
            session.query(View)
            .filter(View.article_id == article_id)
            .delete(synchronize_session="fetch")
        )

    @staticmethod
    def top_articles_since(session: Session, since: datetime, limit: int) -> list[tuple[int, int]]:
        """(article_id, view_count) pairs since ``since``, most viewed first

        Ties are ordered by ascending article id.
        """
        view_count = func.count(View.id).label("view_count")
        rows = (
            session.query(View.article_id, view_count)
            .filter(View.created_at >= since)
            .group_by(View.article_id)
            .order_by(view_count.desc(), View.article_id.asc())
            .limit(limit)
            .all()
        )
        return [(article_id, count) for article_id, count in rows]


class UserRepository:
    """User store"""

    @staticmethod
    def create(
        session: Session,
        email: str,
        name: str,
        password_hash: str,
        role: UserRole = UserRole.ADMIN
    ) -> User:
        user = User(email=email.strip().lower(), name=name, password_hash=password_hash, role=role)
        session.add(user)
        session.flush()
        return user

    @staticmethod
    def get_by_id(session: Session, user_id: int) -> Optional[User]:
        return session.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_by_email(session: Session, email: str) -> Optional[User]:
        return session.query(User).filter(User.email == email.strip().lower()).first()


class SubscriptionRepository:
    """Subscription store"""

    @staticmethod
    def get_by_email(session: Session, email: str) -> Optional[Subscription]:
        """Look up by an already-normalized email"""
        return session.query(Subscription).filter(Subscription.email == email).first()

    @staticmethod
    def count_active(session: Session) -> int:
        return session.query(Subscription).filter(Subscription.is_active == True).count()
