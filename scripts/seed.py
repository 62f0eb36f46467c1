"""
Seed the database with an admin user, sample articles and recent views

Usage:
    python scripts/seed.py
    python scripts/seed.py --views 100
"""

import argparse
import random
import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()

from dailydog.config import settings
from dailydog.database import init_db, get_session, Article, View, UserRepository, ArticleRepository
from dailydog.database.models import UserRole
from dailydog.web.routes.admin import hash_password

ADMIN_EMAIL = "admin@thedailydog.com"
ADMIN_PASSWORD = "admin123"

SAMPLE_ARTICLES = [
    {
        "title": "Breaking: Major Policy Announcement Shakes Washington",
        "slug": "breaking-major-policy-announcement-shakes-washington",
        "excerpt": "A significant policy change announced today has sent shockwaves through the nation's capital.",
        "content": (
            "<p>In a stunning development that has caught many by surprise, a major policy announcement "
            "was made today that could reshape the political landscape for years to come.</p>"
            "<p>The announcement, which came during a high-profile press conference, represents a "
            "significant shift in approach that has been months in the making behind closed doors.</p>"
            "<p>Political analysts are already weighing in on the potential implications, with some "
            "calling it a game-changer while others remain cautious about the long-term effects.</p>"
        ),
        "image_url": "https://images.unsplash.com/photo-1582213782179-e0d53f98f2ca?w=800&h=400&fit=crop",
        "source_text": "Just shared this important update on our Facebook page. The response has been overwhelming!",
        "topics": ["Politics"],
        "is_featured": True,
        "days_ago": 0,
    },
    {
        "title": "Economic Indicators Show Promising Trends",
        "slug": "economic-indicators-show-promising-trends",
        "excerpt": "Latest economic data reveals positive signals for the nation's financial outlook.",
        "content": (
            "<p>The latest economic indicators released this week paint an encouraging picture for "
            "the nation's economic future.</p>"
            "<p>Key metrics including employment rates, consumer confidence, and manufacturing output "
            "all show positive trends that suggest a robust recovery is underway.</p>"
            "<p>Economists are cautiously optimistic about these developments, though they emphasize "
            "the need for continued monitoring of global economic conditions.</p>"
        ),
        "image_url": "https://images.unsplash.com/photo-1611974789855-9c2a0a7236a3?w=800&h=400&fit=crop",
        "source_text": "Shared this economic update on Facebook. Great discussion in the comments!",
        "topics": ["Economy"],
        "is_featured": False,
        "days_ago": 1,
    },
    {
        "title": "Local Community Initiative Gains National Attention",
        "slug": "local-community-initiative-gains-national-attention",
        "excerpt": "A grassroots effort in a small town has captured the imagination of communities nationwide.",
        "content": (
            "<p>What started as a local initiative in a small Midwestern town has now gained national "
            "recognition for its innovative approach to community building.</p>"
            "<p>The program, which focuses on bringing neighbors together through shared activities "
            "and mutual support, has seen remarkable success in its first year of operation.</p>"
            "<p>Organizers hope that their model can be replicated in other communities across the "
            "country, potentially creating a ripple effect of positive change.</p>"
        ),
        "image_url": "https://images.unsplash.com/photo-1521737604893-d14cc237f11d?w=800&h=400&fit=crop",
        "source_text": "This heartwarming story was shared on our Facebook page and got amazing engagement!",
        "topics": ["Community"],
        "is_featured": False,
        "days_ago": 2,
    },
]


def main():
    parser = argparse.ArgumentParser(description="The Daily Dog sample data")
    parser.add_argument("--views", type=int, default=50, help="Number of sample views (default: 50)")
    args = parser.parse_args()

    init_db(settings.database_url)
    now = datetime.utcnow()

    with get_session() as session:
        admin = UserRepository.get_by_email(session, ADMIN_EMAIL)
        if admin is None:
            admin = UserRepository.create(
                session,
                email=ADMIN_EMAIL,
                name="Admin User",
                password_hash=hash_password(ADMIN_PASSWORD),
                role=UserRole.ADMIN,
            )
        print(f"Admin user: {admin.email}")

        for sample in SAMPLE_ARTICLES:
            sample = dict(sample)
            days_ago = sample.pop("days_ago")
            article = ArticleRepository.get_by_slug(session, sample["slug"])
            if article is not None:
                print(f"Article exists: {article.title}")
                continue

            article = Article(
                author_id=admin.id,
                published_at=now - timedelta(days=days_ago),
                **sample,
            )
            session.add(article)
            session.flush()
            print(f"Created article: {article.title}")

        articles = ArticleRepository.list_all_published(session)
        if not articles:
            print("No published articles; skipping views")
            return

        for i in range(args.views):
            session.add(View(
                article_id=random.choice(articles).id,
                ip_hash=f"user_{i}",
                user_agent="Sample User Agent",
                created_at=now - timedelta(hours=random.randint(0, 23)),
            ))
        print(f"Created {args.views} sample views for trending")


if __name__ == "__main__":
    main()
