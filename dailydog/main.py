"""
The Daily Dog main entry point

Runs the web server for the public site, admin editor and JSON API.
"""

import logging

from dotenv import load_dotenv

from dailydog.config import settings
from dailydog.database import init_db

# Logging setup
(settings.BASE_DIR / "logs").mkdir(exist_ok=True)
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler(
            settings.BASE_DIR / "logs" / "dailydog.log",
            encoding="utf-8"
        ),
    ],
)

logger = logging.getLogger(__name__)


def main():
    """Main function"""
    import argparse

    parser = argparse.ArgumentParser(description="The Daily Dog - news publishing site")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create the database tables and exit"
    )

    args = parser.parse_args()

    load_dotenv()

    if args.init_db:
        logger.info("Initializing database...")
        init_db(settings.database_url)
        return

    from dailydog.web.app import run_server

    logger.info("Starting web server on %s:%d", args.host, args.port)
    run_server(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
