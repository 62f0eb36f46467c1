"""
Create an admin or editor account, or reset an existing one

Usage:
    python scripts/create_admin.py --email editor@thedailydog.com --name "Jane Editor" --password secret
    python scripts/create_admin.py --email editor@thedailydog.com --name "Jane Editor" --role editor
"""

import argparse
import getpass
import sys
from pathlib import Path

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()

from dailydog.config import settings
from dailydog.database import init_db, get_session, UserRepository
from dailydog.database.models import UserRole
from dailydog.web.routes.admin import hash_password


def main():
    parser = argparse.ArgumentParser(description="The Daily Dog admin account")
    parser.add_argument("--email", required=True, help="Login email")
    parser.add_argument("--name", required=True, help="Display name")
    parser.add_argument("--password", help="Password (prompted when omitted)")
    parser.add_argument(
        "--role",
        choices=["admin", "editor"],
        default="admin",
        help="Account role (default: admin)"
    )

    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    if not password:
        print("Password must not be empty")
        sys.exit(1)

    role_map = {
        "admin": UserRole.ADMIN,
        "editor": UserRole.EDITOR,
    }

    init_db(settings.database_url)

    with get_session() as session:
        existing = UserRepository.get_by_email(session, args.email)
        if existing:
            existing.name = args.name
            existing.password_hash = hash_password(password)
            existing.role = role_map[args.role]
            print(f"Updated {args.role} account: {existing.email} (id={existing.id})")
            return

        user = UserRepository.create(
            session,
            email=args.email,
            name=args.name,
            password_hash=hash_password(password),
            role=role_map[args.role],
        )
        print(f"Created {args.role} account: {user.email} (id={user.id})")


if __name__ == "__main__":
    main()
