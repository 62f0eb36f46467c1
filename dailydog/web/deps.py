"""FastAPI dependencies and request helpers"""

from fastapi import Request

from dailydog.database import get_session


def client_ip(request: Request) -> str:
    """Client address, honouring reverse-proxy headers"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def user_agent(request: Request) -> str:
    return request.headers.get("user-agent") or "unknown"


def get_db():
    """Database session dependency"""
    with get_session() as session:
        yield session


def get_session_factory():
    """Factory for work that outlives the request (background tasks)"""
    return get_session
