from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from dotenv import load_dotenv
from pathlib import Path
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

env_path = Path(__file__).resolve().parent.parent / ".env"
_ = load_dotenv(dotenv_path=env_path)

from app.config import settings
from app.core.exceptions import (
    CommentNotFound,
    CommentServiceError,
    DeadlineExceeded,
    InvalidArgument,
    InvalidID,
    Unauthorized,
    UserNotFound,
)
from app.core.logging import configure_logging
from app.core.middleware import setup_middleware
from app.database import create_tables
from app.api import comments, websockets
from app.services.websocket_service import channel_manager

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[CommentServiceError], int] = {
    InvalidID: 400,
    InvalidArgument: 422,
    UserNotFound: 404,
    CommentNotFound: 404,
    Unauthorized: 403,
    DeadlineExceeded: 504,
}


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info("🚀 Post Comments API starting up")

    try:
        if settings.AUTO_CREATE_TABLES:
            await create_tables()
            logger.info("✅ Comment tables ready")
    except Exception as e:
        logger.error(f"❌ Startup failed: {e}")
        raise

    yield

    logger.info("🛑 Post Comments API shutting down")


if settings.SENTRY_DSN:
    _ = sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        traces_sample_rate=1.0 if settings.DEBUG else 0.1,
        environment=settings.ENVIRONMENT,
        release=f"post-comments@{settings.VERSION}",
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        send_default_pii=False,
        attach_stacktrace=True,
    )

    logger.info(f"✅ Sentry initialized for environment: {settings.ENVIRONMENT}")
else:
    logger.info("⚠️  Sentry DSN not configured - error tracking disabled")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    openapi_url="/api/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

setup_middleware(app)

app.include_router(comments.router, prefix="/api", tags=["comments"])
app.include_router(websockets.router, tags=["websockets"])


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "channels": channel_manager.get_connection_stats(),
    }


@app.exception_handler(CommentServiceError)
async def comment_error_handler(request: Request, exc: CommentServiceError):
    status_code = ERROR_STATUS_CODES.get(type(exc), 500)
    if status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {exc.code}")

    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.code,
            "detail": exc.message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal",
            "detail": "An unexpected error occurred",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )
