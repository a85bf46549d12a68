from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from datetime import datetime
import asyncio
import traceback

from fyp_repository.core.config import settings
from fyp_repository.core.database import init_db, close_db, AsyncSessionLocal
from fyp_repository.core.exceptions import RepositoryError
from fyp_repository.core.logging_config import logger
from fyp_repository.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from fyp_repository.core.rate_limiter import limiter, RateLimitMiddleware
from fyp_repository.api.v1.router import api_router
from fyp_repository.schemas.common import first_error_message
from fyp_repository.services.auth_service import bootstrap_admin
from fyp_repository.utils.responses import failure_response, success_response


async def validate_critical_config():
    """Validate critical configuration at startup - fail fast if missing"""
    errors = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")

    if not settings.JWT_SECRET_KEY:
        errors.append("JWT_SECRET_KEY is not set")
    elif settings.has_placeholder_secret():
        if settings.is_production():
            errors.append("JWT_SECRET_KEY is using a placeholder value")
        else:
            logger.warning("[Startup] WARNING: JWT_SECRET_KEY is a placeholder - do not use in production")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")


async def ensure_admin_account():
    """Create the admin from ADMIN_EMAIL / ADMIN_PASSWORD when both are set"""
    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        logger.info("[Startup] ADMIN_EMAIL/ADMIN_PASSWORD not set - skipping admin bootstrap")
        return

    async with AsyncSessionLocal() as session:
        admin, created = await bootstrap_admin(session, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
        if created:
            logger.info(f"[Startup] Admin account created: {admin.email}")


def handle_loop_exception(loop: asyncio.AbstractEventLoop, context: dict):
    """Log exceptions from background tasks instead of letting them vanish"""
    exc = context.get("exception")
    if exc is not None:
        logger.log_error_with_context(exc, context="event loop")
    else:
        logger.error(f"[EventLoop] {context.get('message', 'Unhandled error')}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"API Version: {settings.API_VERSION}")
    logger.info("=" * 60)

    await validate_critical_config()

    asyncio.get_running_loop().set_exception_handler(handle_loop_exception)

    settings.ensure_directories()
    await init_db()
    logger.info("[Startup] Database tables ready")

    await ensure_admin_account()

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Archive of final-year project reports with admin moderation",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False
)

# Rate limiter state (read by RateLimitMiddleware on each request)
app.state.limiter = limiter

# Middleware (order matters - last added runs first)
app.add_middleware(RateLimitMiddleware, limit=settings.RATE_LIMIT)
app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time", "Content-Disposition"],
)


# Exception handlers
@app.exception_handler(RepositoryError)
async def repository_exception_handler(request: Request, exc: RepositoryError):
    if exc.status_code >= 500:
        logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    return failure_response(exc.message, exc.status_code, error=exc.code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = first_error_message(exc.errors())
    return failure_response(message, 400, error="VALIDATION_FAILED")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Route not found: {request.method} {request.url.path}"
    else:
        message = str(exc.detail)
    return failure_response(message, exc.status_code, error="HTTP_ERROR", headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    error = None
    if not settings.is_production():
        error = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return failure_response("Internal server error", 500, error=error or "INTERNAL_ERROR")


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Liveness probe"""
    return success_response(
        "Server is running",
        {
            "status": "healthy",
            "appName": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


# Include API router
app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")


def main():
    """Console entry point"""
    import uvicorn
    uvicorn.run(
        "fyp_repository.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG and not settings.is_production()
    )


if __name__ == "__main__":
    main()
