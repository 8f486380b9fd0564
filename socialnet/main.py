"""
SocialNet API - FastAPI application entry point.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from . import __version__
from .config import get_settings
from .database import Database
from .limiter import limiter
from .logging_config import api_logger
from .middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from .responses import register_exception_handlers
from .routes import auth_router, health_router, posts_router, users_router

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown"""
    # Startup
    settings.check_secrets()
    database = Database.from_settings(settings)
    database.connect()
    database.create_all()
    app.state.database = database
    api_logger.info("SocialNet API started", environment=settings.environment)

    yield  # App is running

    # Shutdown
    database.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Social media backend: users, follows, posts, comments and likes",
    version=__version__,
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_exception_handlers(app)

# Security headers middleware
app.add_middleware(SecurityHeadersMiddleware)

# Request logging middleware (only in debug mode)
if settings.debug:
    app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Authorization",
        "Content-Type",
        "Accept",
        "Origin",
        "X-Requested-With",
    ],
    max_age=3600,  # Cache preflight requests for 1 hour
)

# Routes
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(posts_router)
app.include_router(health_router)


@app.get("/")
def root():
    return {
        "message": settings.app_name,
        "docs": "/api/docs" if settings.debug else "Disabled in production",
    }
