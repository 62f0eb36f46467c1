"""Shared Jinja2 templates for the public and admin routes"""

from datetime import datetime
from pathlib import Path

from fastapi.templating import Jinja2Templates

from dailydog.config import settings
from dailydog.publishing import normalize_content

BASE_DIR = Path(__file__).parent


def _format_date(dt: datetime, fmt: str = "%B %d, %Y %I:%M %p") -> str:
    if dt is None:
        return ""
    if isinstance(dt, str):
        return dt
    return dt.strftime(fmt)


templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
templates.env.globals["now"] = datetime.now
templates.env.globals["site_url"] = settings.site_url.rstrip("/")
templates.env.filters["format_date"] = _format_date
templates.env.filters["normalize_content"] = normalize_content
