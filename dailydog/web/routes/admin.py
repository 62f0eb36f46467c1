"""Admin Routes - login, dashboard and article editor"""

import secrets
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from fastapi import APIRouter, Request, Form, Depends
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from dailydog.database import ArticleRepository, UserRepository
from dailydog.database.models import Article
from dailydog.generation import (
    ArticleGenerator,
    GenerationError,
    GenerationTimeoutError,
    QuotaExceededError,
    get_generator,
)
from dailydog.publishing import (
    ArticleInput,
    ArticleNotFoundError,
    create_article,
    update_article,
    delete_article,
)
from dailydog.subscription import SubscriptionManager
from dailydog.web.deps import get_db
from dailydog.web.templating import templates

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("security")

router = APIRouter()

# Admin session management
ADMIN_SESSION_COOKIE = "dd_admin_session"
ADMIN_SESSION_MAX_AGE = 3600 * 8


@dataclass
class AdminSession:
    user_id: int
    expires_at: datetime


_admin_sessions: dict[str, AdminSession] = {}


def create_admin_session(user_id: int) -> str:
    token = secrets.token_hex(32)
    _admin_sessions[token] = AdminSession(
        user_id=user_id,
        expires_at=datetime.now() + timedelta(seconds=ADMIN_SESSION_MAX_AGE),
    )
    return token


def verify_admin_session(session_token: Optional[str]) -> Optional[int]:
    """User id for a live session token, else None"""
    if not session_token or session_token not in _admin_sessions:
        return None
    admin_session = _admin_sessions[session_token]
    if datetime.now() > admin_session.expires_at:
        _admin_sessions.pop(session_token, None)
        return None
    return admin_session.user_id


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=12)).decode()


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        return False


def _admin_user_id(request: Request) -> Optional[int]:
    return verify_admin_session(request.cookies.get(ADMIN_SESSION_COOKIE))


def _split_topics(topics: str) -> list[str]:
    return [t.strip() for t in topics.split(",") if t.strip()]


def _form_input(
    title: str,
    excerpt: str,
    content: str,
    image_url: str,
    source_text: str,
    source_image_url: str,
    topics: str,
    is_featured: Optional[str],
    publish: Optional[str],
) -> ArticleInput:
    return ArticleInput(
        title=title.strip(),
        excerpt=excerpt.strip(),
        content=content,
        image_url=image_url.strip() or None,
        source_text=source_text.strip() or None,
        source_image_url=source_image_url.strip() or None,
        topics=_split_topics(topics),
        is_featured=bool(is_featured),
        publish=bool(publish),
    )


def _render_form(
    request: Request,
    form: dict,
    article: Optional[Article] = None,
    error: Optional[str] = None,
    message: Optional[str] = None,
    status_code: int = 200,
):
    return templates.TemplateResponse("admin/article_form.html", {
        "request": request,
        "title": ("Edit Article" if article else "Create New Article") + " - The Daily Dog",
        "article": article,
        "form": form,
        "error": error,
        "message": message,
    }, status_code=status_code)


def _form_from_article(article: Article) -> dict:
    return {
        "title": article.title,
        "excerpt": article.excerpt or "",
        "content": article.content or "",
        "image_url": article.image_url or "",
        "source_text": article.source_text or "",
        "source_image_url": article.source_image_url or "",
        "topics": ", ".join(article.topics),
        "is_featured": bool(article.is_featured),
        "publish": article.is_published,
    }


EMPTY_FORM = {
    "title": "", "excerpt": "", "content": "", "image_url": "",
    "source_text": "", "source_image_url": "", "topics": "",
    "is_featured": False, "publish": False,
}


@router.get("/admin/login", response_class=HTMLResponse)
async def admin_login_page(request: Request):
    if _admin_user_id(request) is not None:
        return RedirectResponse(url="/admin", status_code=303)
    return templates.TemplateResponse("admin/login.html", {
        "request": request, "title": "Admin Login - The Daily Dog",
    })


@router.post("/admin/login", response_class=HTMLResponse)
async def admin_login_submit(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    session: Session = Depends(get_db),
):
    client_host = request.client.host if request.client else "unknown"
    user = UserRepository.get_by_email(session, email)

    if user and check_password(password, user.password_hash):
        security_logger.info("Admin login success for %s from %s", user.email, client_host)
        token = create_admin_session(user.id)
        response = RedirectResponse(url="/admin", status_code=303)
        response.set_cookie(
            key=ADMIN_SESSION_COOKIE, value=token,
            max_age=ADMIN_SESSION_MAX_AGE, httponly=True, samesite="lax",
        )
        return response

    security_logger.warning("Admin login failed for %s from %s", email, client_host)
    return templates.TemplateResponse("admin/login.html", {
        "request": request, "title": "Admin Login - The Daily Dog",
        "error": "Invalid email or password.", "email": email,
    }, status_code=401)


@router.get("/admin/logout")
async def admin_logout(request: Request):
    session_token = request.cookies.get(ADMIN_SESSION_COOKIE)
    if session_token:
        _admin_sessions.pop(session_token, None)
    response = RedirectResponse(url="/admin/login", status_code=303)
    response.delete_cookie(ADMIN_SESSION_COOKIE)
    return response


@router.get("/admin", response_class=HTMLResponse)
async def admin_dashboard(request: Request, session: Session = Depends(get_db)):
    if _admin_user_id(request) is None:
        return RedirectResponse(url="/admin/login", status_code=303)

    rows = ArticleRepository.list_with_view_counts(session)
    return templates.TemplateResponse("admin/dashboard.html", {
        "request": request, "title": "Admin Dashboard - The Daily Dog",
        "rows": rows,
        "article_count": len(rows),
        "published_count": sum(1 for article, _ in rows if article.is_published),
        "subscriber_count": SubscriptionManager(session).count_active(),
    })


@router.get("/admin/articles/new", response_class=HTMLResponse)
async def new_article_page(request: Request):
    if _admin_user_id(request) is None:
        return RedirectResponse(url="/admin/login", status_code=303)
    return _render_form(request, dict(EMPTY_FORM))


@router.post("/admin/articles/generate", response_class=HTMLResponse)
async def generate_article_form(
    request: Request,
    article_id: Optional[int] = Form(None),
    title: str = Form(default=""),
    excerpt: str = Form(default=""),
    content: str = Form(default=""),
    image_url: str = Form(default=""),
    source_text: str = Form(default=""),
    source_image_url: str = Form(default=""),
    topics: str = Form(default=""),
    is_featured: Optional[str] = Form(None),
    publish: Optional[str] = Form(None),
    session: Session = Depends(get_db),
    generator: ArticleGenerator = Depends(get_generator),
):
    """Fill the editor with an AI draft built from the source text"""
    if _admin_user_id(request) is None:
        return RedirectResponse(url="/admin/login", status_code=303)

    article = ArticleRepository.get_by_id(session, article_id) if article_id else None
    form = {
        "title": title, "excerpt": excerpt, "content": content, "image_url": image_url,
        "source_text": source_text, "source_image_url": source_image_url, "topics": topics,
        "is_featured": bool(is_featured), "publish": bool(publish),
    }

    if not source_text.strip():
        return _render_form(request, form, article, error="Please enter the source post text first.",
                            status_code=400)

    try:
        generated = await run_in_threadpool(generator.generate, source_text, source_image_url or None)
    except QuotaExceededError:
        return _render_form(request, form, article, status_code=429, error=(
            "AI provider quota exceeded. Please check your billing details and add credits to your account."
        ))
    except GenerationTimeoutError:
        return _render_form(request, form, article, status_code=408, error=(
            "Request timed out. The AI generation process took too long. "
            "Please try again with shorter content or try again later."
        ))
    except GenerationError as e:
        logger.error("Article generation failed: %s", e)
        return _render_form(request, form, article, error=f"Failed to generate article: {e}",
                            status_code=500)

    form.update({
        "title": generated.title,
        "excerpt": generated.excerpt,
        "content": generated.content,
        "image_url": generated.image_url or image_url,
    })
    return _render_form(request, form, article, message="Draft generated. Review it before saving.")


@router.post("/admin/articles", response_class=HTMLResponse)
async def create_article_submit(
    request: Request,
    title: str = Form(...),
    excerpt: str = Form(default=""),
    content: str = Form(default=""),
    image_url: str = Form(default=""),
    source_text: str = Form(default=""),
    source_image_url: str = Form(default=""),
    topics: str = Form(default=""),
    is_featured: Optional[str] = Form(None),
    publish: Optional[str] = Form(None),
    session: Session = Depends(get_db),
):
    user_id = _admin_user_id(request)
    if user_id is None:
        return RedirectResponse(url="/admin/login", status_code=303)

    data = _form_input(title, excerpt, content, image_url, source_text,
                       source_image_url, topics, is_featured, publish)
    try:
        article = create_article(session, data, author_id=user_id)
    except Exception as e:
        session.rollback()
        logger.exception("Error creating article: %s", e)
        return _render_form(request, {**_form_input_dict(data), "topics": topics},
                            error=f"Failed to create article: {e}", status_code=500)

    return RedirectResponse(url=f"/admin/articles/{article.id}/edit?saved=1", status_code=303)


@router.get("/admin/articles/{article_id}/edit", response_class=HTMLResponse)
async def edit_article_page(
    request: Request,
    article_id: int,
    saved: Optional[int] = None,
    session: Session = Depends(get_db),
):
    if _admin_user_id(request) is None:
        return RedirectResponse(url="/admin/login", status_code=303)

    article = ArticleRepository.get_by_id(session, article_id)
    if article is None:
        return templates.TemplateResponse("not_found.html", {
            "request": request, "title": "Article Not Found",
        }, status_code=404)

    return _render_form(request, _form_from_article(article), article,
                        message="Article saved." if saved else None)


@router.post("/admin/articles/{article_id}", response_class=HTMLResponse)
async def update_article_submit(
    request: Request,
    article_id: int,
    title: str = Form(...),
    excerpt: str = Form(default=""),
    content: str = Form(default=""),
    image_url: str = Form(default=""),
    source_text: str = Form(default=""),
    source_image_url: str = Form(default=""),
    topics: str = Form(default=""),
    is_featured: Optional[str] = Form(None),
    publish: Optional[str] = Form(None),
    session: Session = Depends(get_db),
):
    user_id = _admin_user_id(request)
    if user_id is None:
        return RedirectResponse(url="/admin/login", status_code=303)

    data = _form_input(title, excerpt, content, image_url, source_text,
                       source_image_url, topics, is_featured, publish)
    try:
        update_article(session, article_id, data, author_id=user_id)
    except ArticleNotFoundError:
        return templates.TemplateResponse("not_found.html", {
            "request": request, "title": "Article Not Found",
        }, status_code=404)
    except Exception as e:
        session.rollback()
        logger.exception("Error updating article %s: %s", article_id, e)
        return _render_form(request, {**_form_input_dict(data), "topics": topics},
                            ArticleRepository.get_by_id(session, article_id),
                            error=f"Failed to update article: {e}", status_code=500)

    return RedirectResponse(url=f"/admin/articles/{article_id}/edit?saved=1", status_code=303)


@router.post("/admin/articles/{article_id}/delete")
async def delete_article_submit(request: Request, article_id: int, session: Session = Depends(get_db)):
    if _admin_user_id(request) is None:
        return RedirectResponse(url="/admin/login", status_code=303)

    try:
        delete_article(session, article_id)
    except ArticleNotFoundError:
        logger.warning("Delete requested for missing article %s", article_id)
    return RedirectResponse(url="/admin", status_code=303)


def _form_input_dict(data: ArticleInput) -> dict:
    return {
        "title": data.title,
        "excerpt": data.excerpt,
        "content": data.content,
        "image_url": data.image_url or "",
        "source_text": data.source_text or "",
        "source_image_url": data.source_image_url or "",
        "is_featured": data.is_featured,
        "publish": data.publish,
    }
