import logging
import traceback
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from lanyard.assets import AssetCache
from lanyard.config import settings
from lanyard.errors import BadgeError
from lanyard.routes.admin_api import router as admin_router
from lanyard.routes.badges_api import router as badges_router
from lanyard.routes.views import router as views_router
from lanyard.store import close_pool

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.asset_cache = AssetCache(settings.assets_dir)
    app.state.http_client = httpx.AsyncClient(timeout=settings.asset_fetch_timeout_seconds)
    yield
    await app.state.http_client.aclose()
    await close_pool()


app = FastAPI(title="Lanyard", lifespan=lifespan)

app.include_router(badges_router)
app.include_router(admin_router)
app.include_router(views_router)


@app.get("/api/health")
async def health_check():
    return {"status": "ok"}


@app.exception_handler(BadgeError)
async def badge_error(request: Request, exc: BadgeError):
    logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse({"success": False, "error": exc.detail}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"][1:])
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return JSONResponse({"success": False, "error": "; ".join(messages)}, status_code=400)


def _failure_message(path: str) -> str:
    if path.endswith(".pdf") or path == "/api/event-badges-enhanced":
        return "Failed to generate badges PDF"
    return "Internal server error"


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    body = {"success": False, "error": _failure_message(request.url.path)}
    if settings.environment != "production":
        body["details"] = str(exc)
        body["trace"] = traceback.format_exception(exc)
    return JSONResponse(body, status_code=500)
