"""
Main application entry point for the portal content viewer.
"""
import secrets
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.sessions import SessionMiddleware

from .features.core.logging import setup_logging
from .features.core.database import engine
from .features.core.templates import templates
from .features.core.config import get_settings
from .features.dynamic_content.exceptions import ContentDefinitionError
from .features.dynamic_content_viewer.routes import router as viewer_router
from .middleware.request_context import RequestContextMiddleware
from .middleware.secure_headers import SecureHeadersMiddleware

settings = get_settings()
setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application lifespan events."""
    logger.info("Starting portal content viewer", environment=settings.ENVIRONMENT)

    # Tables are managed by Alembic migrations: alembic upgrade head

    yield

    logger.info("Shutting down portal content viewer")
    await engine.dispose()


app = FastAPI(
    title="Portal Content Viewer",
    description="Renders and edits structured content items per module.",
    lifespan=lifespan,
)

# Anti-forgery tokens live in the session
SESSION_SECRET_KEY = settings.SESSION_SECRET_KEY or secrets.token_urlsafe(32)
app.add_middleware(SessionMiddleware, secret_key=SESSION_SECRET_KEY)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000
        structlog.get_logger("request").info(
            "Request handled",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=round(process_time, 2),
        )
        return response


app.add_middleware(RequestLoggingMiddleware)

# Outside the request logger so its records carry request and portal ids
app.add_middleware(RequestContextMiddleware, default_portal_id=settings.DEFAULT_PORTAL_ID)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CORS_ORIGINS] if settings.CORS_ORIGINS != '*' else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(SecureHeadersMiddleware)

app.include_router(viewer_router, prefix="/modules")


@app.get("/health", tags=["infra"])
async def health():
    """Basic health check for load balancers."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/health/db", tags=["infra"])
async def db_health():
    """Database connectivity health check."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected"}
    except Exception as e:
        logger.exception("DB health check failed")
        return JSONResponse(status_code=500, content={"status": "error", "detail": str(e)})


def _wants_html(request: Request) -> bool:
    if request.url.path.startswith("/api/"):
        return False
    return "text/html" in request.headers.get("accept", "")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


@app.exception_handler(ContentDefinitionError)
async def content_definition_exception_handler(request: Request, exc: ContentDefinitionError):
    logger.error("Broken content definition", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"detail": "Content definition error"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    headers = getattr(exc, "headers", None)
    if not _wants_html(request):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)

    return templates.TemplateResponse(
        request,
        "error/404.html",
        {"detail": exc.detail, "status_code": exc.status_code},
        status_code=exc.status_code,
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error("Request validation error", path=request.url.path, errors=exc.errors())
    if not _wants_html(request):
        return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})
    return templates.TemplateResponse(request, "error/422.html", {"detail": exc.errors()}, status_code=422)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("portal.main:app", host="0.0.0.0", port=8000, reload=True)
