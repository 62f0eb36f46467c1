"""
SQLAlchemy database models
"""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

DEFAULT_AUTHOR_NAME = "Daily Dog Staff"
DEFAULT_AUTHOR_EMAIL = "staff@thedailydog.com"


class UserRole(PyEnum):
    """User roles"""
    ADMIN = "ADMIN"
    EDITOR = "EDITOR"


class User(Base):
    """Admin/editor account"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(100))
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), default=UserRole.ADMIN)

    created_at = Column(DateTime, default=datetime.utcnow)

    articles = relationship("Article", back_populates="author", passive_deletes=True)

    def __repr__(self):
        return f"<User(email='{self.email}', role='{self.role.value if self.role else None}')>"


class Article(Base):
    """Published or draft article"""
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, autoincrement=True)

    title = Column(String(500), nullable=False)
    slug = Column(String(255), unique=True, nullable=False)
    excerpt = Column(Text)
    content = Column(Text, nullable=False, default="")
    image_url = Column(String(1000))

    # Provenance of AI-assisted articles
    source_text = Column(Text)
    source_image_url = Column(String(1000))

    is_featured = Column(Boolean, default=False)
    published_at = Column(DateTime)  # None = draft

    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = relationship("User", back_populates="articles")
    topic_links = relationship(
        "ArticleTopic",
        back_populates="article",
        cascade="all, delete-orphan",
        order_by="ArticleTopic.id",
    )
    views = relationship("View", back_populates="article", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_article_published", "published_at"),
        Index("idx_article_featured", "is_featured"),
    )

    @property
    def topics(self) -> list[str]:
        return [link.name for link in self.topic_links]

    @topics.setter
    def topics(self, names: list[str]) -> None:
        # Reuse rows for unchanged names; the unit of work inserts before it deletes
        existing = {link.name: link for link in self.topic_links}
        self.topic_links = [existing.get(name) or ArticleTopic(name=name) for name in names]

    @property
    def is_published(self) -> bool:
        return self.published_at is not None

    @property
    def author_name(self) -> str:
        return (self.author.name if self.author else None) or DEFAULT_AUTHOR_NAME

    @property
    def author_email(self) -> str:
        return (self.author.email if self.author else None) or DEFAULT_AUTHOR_EMAIL

    def to_dict(self) -> dict:
        """Serialize using the JSON API's field names"""
        def _iso(dt):
            return dt.isoformat() if dt else None

        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "excerpt": self.excerpt,
            "content": self.content,
            "imageUrl": self.image_url,
            "sourceText": self.source_text,
            "sourceImageUrl": self.source_image_url,
            "topics": self.topics,
            "isFeatured": bool(self.is_featured),
            "publishedAt": _iso(self.published_at),
            "authorId": self.author_id,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Article(id={self.id}, slug='{self.slug}')>"


class ArticleTopic(Base):
    """Topic (category) tag on an article"""
    __tablename__ = "article_topics"

    id = Column(Integer, primary_key=True, autoincrement=True)
    article_id = Column(Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)

    article = relationship("Article", back_populates="topic_links")

    __table_args__ = (
        UniqueConstraint("article_id", "name", name="uq_article_topic"),
        Index("idx_article_topic_name", "name"),
    )


class View(Base):
    """Page view event (append-only)"""
    __tablename__ = "views"

    id = Column(Integer, primary_key=True, autoincrement=True)

    article_id = Column(Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False)
    ip_hash = Column(String(64))  # never the raw address
    user_agent = Column(String(500))

    created_at = Column(DateTime, default=datetime.utcnow)

    article = relationship("Article", back_populates="views")

    __table_args__ = (
        Index("idx_view_created", "created_at"),
        Index("idx_view_article", "article_id"),
    )

    def __repr__(self):
        return f"<View(article_id={self.article_id}, created_at='{self.created_at}')>"


class Subscription(Base):
    """Newsletter subscription with consent data"""
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, autoincrement=True)

    email = Column(String(255), unique=True, nullable=False)  # lower-cased
    is_active = Column(Boolean, default=True)

    subscribed_at = Column(DateTime, default=datetime.utcnow)
    unsubscribed_at = Column(DateTime)

    # GDPR consent record
    ip_address = Column(String(64))
    user_agent = Column(String(500))
    source = Column(String(100), default="website")

    __table_args__ = (
        Index("idx_subscription_active", "is_active"),
    )

    def __repr__(self):
        return f"<Subscription(email='{self.email}', active={self.is_active})>"
