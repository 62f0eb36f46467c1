"""
Best-effort page view recording
"""

import hashlib
import logging
from typing import Callable, ContextManager

from sqlalchemy.orm import Session

from ..database.repository import ViewRepository

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], ContextManager[Session]]


def hash_client(ip_address: str, secret: str) -> str:
    """Opaque identifier for a client address; the raw IP is never stored"""
    data = f"{secret}:{ip_address or 'unknown'}"
    return hashlib.sha256(data.encode()).hexdigest()


def record_view(
    session_factory: SessionFactory,
    article_id: int,
    ip_hash: str,
    user_agent: str
) -> None:
    """
    Append one view event for an article

    Telemetry only: storage failures are logged and never reach the caller.
    Runs after the response is sent, so it opens its own session.
    """
    try:
        with session_factory() as session:
            ViewRepository.create(session, article_id, ip_hash, (user_agent or "unknown")[:500])
    except Exception as e:
        logger.warning("Failed to track view for article %s: %s", article_id, e)
