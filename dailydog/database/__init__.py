"""
Database module
"""

from .models import Base, Article, ArticleTopic, View, User, UserRole, Subscription
from .repository import (
    create_db_engine,
    init_db,
    get_session,
    ArticleRepository,
    ViewRepository,
    UserRepository,
    SubscriptionRepository,
)

__all__ = [
    "Base",
    "Article",
    "ArticleTopic",
    "View",
    "User",
    "UserRole",
    "Subscription",
    "create_db_engine",
    "init_db",
    "get_session",
    "ArticleRepository",
    "ViewRepository",
    "UserRepository",
    "SubscriptionRepository",
]
