"""API Routes - REST API endpoints"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from dailydog.database import User, UserRepository
from dailydog.generation import (
    ArticleGenerator,
    GenerationError,
    GenerationTimeoutError,
    QuotaExceededError,
    get_generator,
)
from dailydog.publishing import (
    ArticleNotFoundError,
    create_article,
    update_article,
    delete_article,
)
from dailydog.subscription import (
    SubscriptionManager,
    InvalidEmailError,
    SubscriptionConflictError,
    SubscriptionNotFoundError,
)
from dailydog.web.deps import get_db, client_ip, user_agent
from dailydog.web.schemas import ArticlePayload, GeneratePayload, SubscribePayload, UnsubscribePayload

from .admin import verify_admin_session, ADMIN_SESSION_COOKIE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class APIError(Exception):
    """Rendered as ``{"error": ..., "details": ...}`` with the given status"""

    def __init__(self, status_code: int, error: str, details: Optional[str] = None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details

    def to_response(self) -> JSONResponse:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return JSONResponse(status_code=self.status_code, content=body)


def require_admin(request: Request) -> int:
    """Session user id or 401"""
    user_id = verify_admin_session(request.cookies.get(ADMIN_SESSION_COOKIE))
    if user_id is None:
        raise APIError(401, "Unauthorized")
    return user_id


def require_author(user_id: int = Depends(require_admin), session: Session = Depends(get_db)) -> User:
    """Session user, which must still exist in the database"""
    user = UserRepository.get_by_id(session, user_id)
    if user is None:
        logger.error("User not found in database: %s", user_id)
        raise APIError(404, "User not found in database")
    return user


# ==================== Articles ====================

@router.post("/articles")
async def create_article_endpoint(
    payload: ArticlePayload,
    user: User = Depends(require_author),
    session: Session = Depends(get_db),
):
    try:
        article = create_article(session, payload.to_input(), author_id=user.id)
        return article.to_dict()
    except Exception as e:
        session.rollback()
        logger.exception("Error creating article (user %s): %s", user.id, e)
        raise APIError(500, "Failed to create article", str(e))


@router.put("/articles/{article_id}")
async def update_article_endpoint(
    article_id: int,
    payload: ArticlePayload,
    user: User = Depends(require_author),
    session: Session = Depends(get_db),
):
    try:
        article = update_article(session, article_id, payload.to_input(), author_id=user.id)
        return article.to_dict()
    except ArticleNotFoundError as e:
        raise APIError(404, "Article not found", str(e))
    except Exception as e:
        session.rollback()
        logger.exception("Error updating article %s: %s", article_id, e)
        raise APIError(500, "Failed to update article", str(e))


@router.delete("/articles/{article_id}")
async def delete_article_endpoint(
    article_id: int,
    user_id: int = Depends(require_admin),
    session: Session = Depends(get_db),
):
    try:
        delete_article(session, article_id)
        return {"success": True}
    except ArticleNotFoundError as e:
        raise APIError(404, "Article not found", str(e))
    except Exception as e:
        session.rollback()
        logger.exception("Error deleting article %s: %s", article_id, e)
        raise APIError(500, "Failed to delete article", str(e))


# ==================== Generation ====================

@router.post("/generate-article")
async def generate_article_endpoint(
    payload: GeneratePayload,
    user_id: int = Depends(require_admin),
    generator: ArticleGenerator = Depends(get_generator),
):
    if not payload.source_text or not payload.source_text.strip():
        raise APIError(400, "Source text is required")

    try:
        generated = await run_in_threadpool(
            generator.generate, payload.source_text, payload.source_image_url or None
        )
        return generated.to_dict()
    except QuotaExceededError as e:
        logger.warning("Generation quota exceeded: %s", e)
        raise APIError(429, "AI provider quota exceeded", str(e))
    except GenerationTimeoutError as e:
        logger.warning("Generation timed out: %s", e)
        raise APIError(408, "Request timed out", str(e))
    except GenerationError as e:
        logger.error("Generation failed: %s", e)
        raise APIError(500, "Failed to generate article", str(e))
    except Exception as e:
        logger.exception("Error generating article: %s", e)
        raise APIError(500, "Failed to generate article", str(e))


# ==================== Subscriptions ====================

@router.post("/subscribe")
async def subscribe_endpoint(
    payload: SubscribePayload,
    request: Request,
    session: Session = Depends(get_db),
):
    manager = SubscriptionManager(session)
    try:
        result = manager.subscribe(
            payload.email,
            ip_address=client_ip(request),
            user_agent=user_agent(request),
            source=payload.source or "website",
        )
    except InvalidEmailError as e:
        raise APIError(400, str(e))
    except SubscriptionConflictError as e:
        raise APIError(409, str(e))
    except Exception as e:
        session.rollback()
        logger.exception("Subscription error: %s", e)
        raise APIError(500, "Failed to process subscription. Please try again.")

    if result.reactivated:
        return {"message": "Welcome back! Your subscription has been reactivated."}
    return {"message": "Successfully subscribed to our newsletter!"}


@router.delete("/subscribe")
async def unsubscribe_endpoint(payload: UnsubscribePayload, session: Session = Depends(get_db)):
    manager = SubscriptionManager(session)
    try:
        manager.unsubscribe(payload.email)
    except InvalidEmailError as e:
        raise APIError(400, str(e))
    except SubscriptionNotFoundError as e:
        raise APIError(404, str(e))
    except SubscriptionConflictError as e:
        raise APIError(409, str(e))
    except Exception as e:
        session.rollback()
        logger.exception("Unsubscribe error: %s", e)
        raise APIError(500, "Failed to process unsubscribe request. Please try again.")

    return {"message": "Successfully unsubscribed from our newsletter."}


@router.get("/health")
async def health_check():
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}
