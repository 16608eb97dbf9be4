import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi import _rate_limit_exceeded_handler
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app import database
from app.config import Settings, get_settings
from app.database import Base
from app.routers import auth_router, dashboard_router, plots_router, weather_router
from app.routers.auth import limiter
from app.services.feed_client import FeedClient
from app.services.poller import Poller, PollerContext


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    feed_client: Optional[FeedClient] = None,
    scheduler=None,
) -> FastAPI:
    """Build the API with an explicit poller context."""
    settings = settings or get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    if engine is None:
        engine = database.engine
        session_factory = database.SessionLocal
    else:
        session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    context = PollerContext(
        settings=settings,
        session_factory=session_factory,
        feed_client=feed_client or FeedClient(settings.feed_url, timeout=settings.feed_timeout_seconds),
    )
    poller = Poller(context, scheduler=scheduler)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create tables on startup; stop polling on shutdown."""
        Base.metadata.create_all(bind=engine)
        yield
        poller.stop()

    app = FastAPI(
        title="Parcela Monitor API",
        description="Plot sensor dashboard backend: feed polling, reconciliation and archived plots",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.context = context
    app.state.poller = poller
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        """Set basic security headers for all API responses."""
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    app.include_router(auth_router)
    app.include_router(dashboard_router)
    app.include_router(plots_router)
    app.include_router(weather_router)

    @app.get("/health")
    def health_check():
        """Health check endpoint for Docker."""
        return {"status": "healthy", "poller": poller.state.value}

    @app.get("/")
    def root():
        """Root endpoint with API information."""
        return {
            "name": "Parcela Monitor API",
            "version": "1.0.0",
            "docs": "/docs",
            "auth": {
                "signup": "/auth/signup",
                "login": "/auth/login"
            },
            "data": {
                "dashboard": "/dashboard",
                "refresh": "/dashboard/refresh",
                "plots": "/plots",
                "archived": "/plots/archived",
                "history": "/plots/history",
                "weather": "/weather"
            }
        }

    return app


app = create_app()
