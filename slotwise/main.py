"""
FastAPI application for the booking backend

Availability and booking logic lives in slotwise.services; routes are thin.
"""
import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from slotwise.config.redis import close_redis_pool, get_redis_pool
from slotwise.config.settings import get_settings
from slotwise.core.middleware import correlation_id_middleware, request_logging_middleware
from slotwise.core.monitoring import health_router
from slotwise.api.v1.router import api_v1_router
from slotwise.utils.my_logging import setup_logging
from slotwise.api.middleware.rate_limit_middleware import RateLimitMiddleware, default_rules
from slotwise.services.rate_limit.rate_limit_store import (
    InMemoryRateLimitStore,
    RateLimitStore,
    RedisRateLimitStore,
)

settings = get_settings()
logger = logging.getLogger(__name__)


def build_rate_limit_store() -> RateLimitStore:
    """Store selected by RATE_LIMIT_BACKEND ("memory" or "redis")"""
    if settings.RATE_LIMIT_BACKEND == "redis":
        import redis.asyncio as redis

        return RedisRateLimitStore(redis.Redis(connection_pool=get_redis_pool()))
    return InMemoryRateLimitStore()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    setup_logging()
    logger.info(f"{settings.APP_NAME} API starting up")

    routes_by_tag = defaultdict(list)
    for route in app.routes:
        if isinstance(route, APIRoute):
            tag = route.tags[0] if route.tags else "other"
            for method in route.methods:
                routes_by_tag[tag].append((method, route.path))

    for tag, routes in sorted(routes_by_tag.items()):
        for method, path in sorted(routes, key=lambda x: (x[1], x[0])):
            logger.debug(f"[{tag}] {method:8} {path}")

    logger.info(f"Rate limiting backed by {type(app.state.rate_limit_store).__name__}")

    yield

    # Shutdown
    if settings.RATE_LIMIT_BACKEND == "redis":
        await close_redis_pool()
    logger.info(f"{settings.APP_NAME} API shutting down")


def create_app(rate_limit_store: Optional[RateLimitStore] = None) -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Booking and scheduling with availability computation",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    store = rate_limit_store or build_rate_limit_store()
    app.state.rate_limit_store = store

    app.add_middleware(RateLimitMiddleware, store=store, rules=default_rules(settings))

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "PUT"],
        allow_headers=["*"],
    )

    # Registered last runs first: the correlation ID is set before logging
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    # Include routers
    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "service": f"{settings.APP_NAME} API",
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "api": "/api/v1/",
                "health": "/health",
                "docs": "/docs" if settings.DEBUG else "disabled"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "slotwise.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
