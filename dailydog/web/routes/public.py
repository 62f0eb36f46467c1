"""Public Routes - reader-facing pages"""

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Request, Depends, BackgroundTasks
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session

from dailydog.config import settings
from dailydog.publishing import (
    get_home_page,
    get_published_by_slug,
    get_related,
    hash_client,
    record_view,
    build_sitemap,
)
from dailydog.web.deps import get_db, get_session_factory, client_ip, user_agent
from dailydog.web.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter()


def share_links(url: str, title: str) -> dict:
    share_url = quote(url, safe="")
    share_text = quote(title, safe="")
    return {
        "x": f"https://twitter.com/intent/tweet?url={share_url}&text={share_text}",
        "facebook": f"https://www.facebook.com/sharer/sharer.php?u={share_url}",
        "linkedin": f"https://www.linkedin.com/sharing/share-offsite/?url={share_url}",
    }


@router.get("/", response_class=HTMLResponse)
async def home(request: Request, topic: Optional[str] = None, session: Session = Depends(get_db)):
    topic = topic.strip() if topic else None
    page = get_home_page(session, topic=topic)
    return templates.TemplateResponse("index.html", {
        "request": request,
        "title": f"{topic} - The Daily Dog" if topic else "The Daily Dog - Guarding America's Values",
        "topic": topic,
        "hero": page.hero,
        "sub_featured": page.sub_featured,
        "latest": page.latest,
        "trending": page.trending,
    })


@router.get("/article/{slug}", response_class=HTMLResponse)
async def article_page(
    request: Request,
    slug: str,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_db),
    session_factory=Depends(get_session_factory),
):
    article = get_published_by_slug(session, slug)
    if article is None:
        return templates.TemplateResponse("not_found.html", {
            "request": request, "title": "Article Not Found",
        }, status_code=404)

    # Recorded after the response is sent; never blocks or fails the page
    background_tasks.add_task(
        record_view,
        session_factory,
        article.id,
        hash_client(client_ip(request), settings.secret_key),
        user_agent(request),
    )

    canonical_url = f"{settings.site_url.rstrip('/')}/article/{article.slug}"
    response = templates.TemplateResponse("article.html", {
        "request": request,
        "title": article.title,
        "article": article,
        "related": get_related(session, article),
        "canonical_url": canonical_url,
        "share": share_links(canonical_url, article.title),
    })

    # The view is written on another connection; end the read transaction first
    session.commit()
    return response


@router.get("/privacy", response_class=HTMLResponse)
async def privacy(request: Request):
    return templates.TemplateResponse("privacy.html", {
        "request": request, "title": "Privacy Policy - The Daily Dog",
    })


@router.get("/sitemap.xml")
async def sitemap(request: Request, session: Session = Depends(get_db)):
    entries = build_sitemap(session, settings.site_url)
    body = templates.get_template("sitemap.xml").render(entries=entries)
    return Response(content=body, media_type="application/xml")
