# backend/app/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from .core.config import settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .core.redis import close_redis_client
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .middleware.rate_limiter_asgi import RateLimitMiddlewareASGI
from .routes.v1 import (
    auth as auth_v1,
    health as health_v1,
    prometheus as prometheus_v1,
    sessions as sessions_v1,
    trainers as trainers_v1,
)

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")
    if not settings.rate_limit_enabled:
        logger.warning("Rate limiting is disabled")

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")
    close_redis_client()


def _unique_operation_id(route: APIRoute) -> str:
    methods = "_".join(sorted(m.lower() for m in route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "").strip("_")
    name = (route.name or "operation").lower().replace(" ", "_")
    return f"{methods}__{path}__{name}".strip("_")


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
    generate_unique_id_function=_unique_operation_id,
)

# Register unified error envelope handlers
register_error_handlers(app)

# Middleware added last runs first: CORS, then rate limiting, then metrics
app.add_middleware(PrometheusMiddleware)
app.add_middleware(RateLimitMiddlewareASGI)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.client_url],
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)
logger.info("CORS allow_origins=%s allow_credentials=%s", [settings.client_url], True)

# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(auth_v1.router, prefix="/auth")
api_v1.include_router(trainers_v1.router, prefix="/training")
api_v1.include_router(sessions_v1.router, prefix="/training")

app.include_router(api_v1)
app.include_router(health_v1.router)
app.include_router(prometheus_v1.router)
