"""
The Daily Dog Web Application
Public site, admin editor and JSON API
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from dailydog import __version__
from dailydog.config import settings
from dailydog.database import init_db
from dailydog.web.routes import public_router, admin_router, api_router, APIError

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).parent


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(settings.database_url)
    Path(settings.media_dir).mkdir(parents=True, exist_ok=True)
    logger.info("The Daily Dog started (provider=%s)", settings.llm_provider)
    yield


app = FastAPI(
    title="The Daily Dog",
    description="News publishing site with AI-assisted editing",
    version=__version__,
    lifespan=lifespan,
)

app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")
app.mount("/media", StaticFiles(directory=str(settings.media_dir), check_dir=False), name="media")

app.include_router(public_router)
app.include_router(admin_router)
app.include_router(api_router)


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    return exc.to_response()


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400 with field-level details"""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


def run_server(host: str = "0.0.0.0", port: int = 8000):
    """Run the web server"""
    import uvicorn
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
