"""
Shared fixtures: in-memory database and an app client wired to it
"""

import sys
from contextlib import contextmanager
from pathlib import Path

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

sys.path.insert(0, str(Path(__file__).parent.parent))

from dailydog.database import Base, ArticleRepository, create_db_engine


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test"""
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @contextmanager
    def factory():
        session = SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


@pytest.fixture
def session(engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def stale_slug_lookup(monkeypatch):
    """Make the slug availability check answer "free" for slugs that are taken

    Simulates a concurrent writer claiming the slug between check and flush.
    Call with ``times`` for that many stale answers, or with no argument for
    every answer.
    """
    real_slug_taken = ArticleRepository.slug_taken

    def apply(times=None):
        remaining = {"stale": times}

        def slug_taken(session, slug, exclude_id=None):
            if remaining["stale"] is None:
                return False
            if remaining["stale"] > 0:
                remaining["stale"] -= 1
                return False
            return real_slug_taken(session, slug, exclude_id)

        monkeypatch.setattr(ArticleRepository, "slug_taken", staticmethod(slug_taken))

    return apply
