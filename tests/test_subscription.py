"""
Newsletter subscription lifecycle tests
"""

import pytest

from dailydog.database import Subscription
from dailydog.subscription import (
    SubscriptionManager,
    InvalidEmailError,
    SubscriptionConflictError,
    SubscriptionNotFoundError,
)


class TestSubscriptionManager:
    """SubscriptionManager tests"""

    @pytest.fixture
    def manager(self, session):
        return SubscriptionManager(session)

    def test_subscribe_new(self, manager):
        result = manager.subscribe("Reader@Example.com", ip_address="1.2.3.4", user_agent="pytest")

        assert result.reactivated is False
        assert result.subscription.email == "reader@example.com"
        assert result.subscription.is_active is True
        assert result.subscription.ip_address == "1.2.3.4"
        assert result.subscription.source == "website"

    def test_double_subscribe_conflicts(self, manager):
        manager.subscribe("reader@example.com")

        with pytest.raises(SubscriptionConflictError, match="already subscribed"):
            manager.subscribe("reader@example.com")

    def test_email_identity_is_case_insensitive(self, manager, session):
        manager.subscribe("reader@example.com")

        with pytest.raises(SubscriptionConflictError):
            manager.subscribe("  READER@example.COM ")
        assert session.query(Subscription).count() == 1

    def test_unsubscribe_then_resubscribe_reactivates(self, manager, session):
        manager.subscribe("reader@example.com")
        unsubscribed = manager.unsubscribe("reader@example.com")

        assert unsubscribed.is_active is False
        assert unsubscribed.unsubscribed_at is not None

        result = manager.subscribe("reader@example.com", source="footer")

        assert result.reactivated is True
        assert result.subscription.is_active is True
        assert result.subscription.unsubscribed_at is None
        assert result.subscription.source == "footer"
        assert session.query(Subscription).count() == 1

    def test_unsubscribe_unknown_email(self, manager):
        with pytest.raises(SubscriptionNotFoundError, match="not found"):
            manager.unsubscribe("nobody@example.com")

    def test_double_unsubscribe_conflicts(self, manager):
        manager.subscribe("reader@example.com")
        manager.unsubscribe("reader@example.com")

        with pytest.raises(SubscriptionConflictError, match="already unsubscribed"):
            manager.unsubscribe("reader@example.com")

    @pytest.mark.parametrize("email", ["", None, "not-an-email", "a@b", "two words@example.com"])
    def test_invalid_email_rejected(self, manager, email):
        with pytest.raises(InvalidEmailError):
            manager.subscribe(email)

    def test_count_active(self, manager):
        manager.subscribe("a@example.com")
        manager.subscribe("b@example.com")
        manager.unsubscribe("b@example.com")

        assert manager.count_active() == 1
