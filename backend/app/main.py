from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.database import close_db, init_db
from app.core.exceptions import DecksterError, error_response
from app.core.logging_config import logger
from app.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from app.core.rate_limiter import limiter, rate_limit_exceeded_handler
from app.api.v1.router import api_router
from app.modules.builder.element_dispatcher import ElementCommandDispatcher
from app.modules.builder.generation import TextLabsGenerator
from app.modules.builder.session_guard import SessionGuardRegistry
from app.modules.oauth.google_provider import GoogleOAuthProvider
from app.services.elementor_client import ElementorClient
from app.services.layout_service_client import LayoutServiceClient
from app.services.stripe_service import StripeBillingService
from app.services.textlabs_client import TextLabsClient
from slowapi.errors import RateLimitExceeded


def validate_critical_config():
    """Validate critical configuration at startup - fail fast if missing"""
    errors = []
    warnings = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")

    if not settings.SECRET_KEY or settings.SECRET_KEY == "CHANGE_ME":
        errors.append("SECRET_KEY is not set or using default value")

    if not settings.JWT_SECRET_KEY or settings.JWT_SECRET_KEY == "CHANGE_ME":
        errors.append("JWT_SECRET_KEY is not set or using default value")

    # Warnings: the app runs but these features are off
    if not settings.STRIPE_SECRET_KEY:
        warnings.append("STRIPE_SECRET_KEY not set - billing disabled")
    if not settings.GOOGLE_CLIENT_ID:
        warnings.append("GOOGLE_CLIENT_ID not set - Google sign-in disabled")
    if not settings.CRON_SECRET:
        warnings.append("CRON_SECRET not set - session cleanup cron will be rejected")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    for warn in warnings:
        logger.warning(f"[Startup] WARNING: {warn}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the service clients once, share them through app.state, close them on shutdown"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME} API...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info("=" * 60)

    validate_critical_config()
    await init_db()

    layout_service = LayoutServiceClient(settings.LAYOUT_SERVICE_URL, timeout=settings.SERVICE_REQUEST_TIMEOUT)
    elementor = ElementorClient(settings.ELEMENTOR_URL, timeout=settings.SERVICE_REQUEST_TIMEOUT)
    textlabs = TextLabsClient(settings.EFFECTIVE_TEXTLABS_URL, timeout=settings.SERVICE_REQUEST_TIMEOUT)
    dispatcher = ElementCommandDispatcher(layout_service, elementor)

    app.state.layout_service = layout_service
    app.state.elementor = elementor
    app.state.textlabs = textlabs
    app.state.dispatcher = dispatcher
    app.state.session_guards = SessionGuardRegistry(
        create_session=textlabs.create_session_id,
        timeout=settings.TEXTLABS_SESSION_TIMEOUT,
    )
    app.state.generator = TextLabsGenerator(
        textlabs, dispatcher, message_timeout=settings.TEXTLABS_MESSAGE_TIMEOUT
    )
    app.state.billing = StripeBillingService.from_settings()
    app.state.google_oauth = GoogleOAuthProvider(settings.GOOGLE_CLIENT_ID)

    logger.info(
        f"[Startup] Builder services - layout: {layout_service.base_url}, "
        f"elementor: {elementor.base_url}, textlabs: {textlabs.base_url}"
    )

    yield

    logger.info(f"Shutting down {settings.APP_NAME} API...")
    await app.state.session_guards.close()
    await layout_service.close()
    await elementor.close()
    await textlabs.close()
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Control plane for the Deckster presentation builder",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False  # Prevent 307 redirects that break CORS
)

# Add rate limiter state and exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Add middleware (order matters - last added runs first)
# 1. Request logging (runs first for all requests)
app.add_middleware(RequestLoggingMiddleware)

# 2. Security headers
app.add_middleware(SecurityHeadersMiddleware)

# 3. Request size limit (uploads are capped at 25MB per file)
app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_FILE_SIZE + 5 * 1024 * 1024)

# 4. CORS - Origins from CORS_ORIGINS_STR in .env
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


# Exception handlers
@app.exception_handler(DecksterError)
async def deckster_exception_handler(request: Request, exc: DecksterError):
    if exc.status_code >= 500:
        logger.error(f"[{exc.code}] {exc.message}", extra={"error_details": exc.details})
    else:
        logger.warning(f"[{exc.code}] {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "message": str(exc) if settings.DEBUG else "An error occurred"
        }
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }


# Include API router
app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )
