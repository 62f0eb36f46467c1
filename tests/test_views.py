"""
View recording tests
"""

from contextlib import contextmanager

from dailydog.database import Article, View
from dailydog.publishing import hash_client, record_view


class TestHashClient:
    """hash_client tests"""

    def test_raw_ip_not_exposed(self):
        digest = hash_client("203.0.113.7", "secret")
        assert "203.0.113.7" not in digest
        assert len(digest) == 64

    def test_stable_per_secret(self):
        assert hash_client("203.0.113.7", "a") == hash_client("203.0.113.7", "a")
        assert hash_client("203.0.113.7", "a") != hash_client("203.0.113.7", "b")


class TestRecordView:
    """record_view tests"""

    def test_records_view(self, session_factory):
        with session_factory() as session:
            article = Article(title="Viewed", slug="viewed", content="")
            session.add(article)
            session.flush()
            article_id = article.id

        record_view(session_factory, article_id, "hash", "pytest")

        with session_factory() as session:
            views = session.query(View).filter(View.article_id == article_id).all()
            assert len(views) == 1
            assert views[0].ip_hash == "hash"
            assert views[0].user_agent == "pytest"

    def test_storage_failure_is_swallowed(self):
        @contextmanager
        def broken_factory():
            raise RuntimeError("database down")
            yield

        # Must not raise
        record_view(broken_factory, 1, "hash", "pytest")
