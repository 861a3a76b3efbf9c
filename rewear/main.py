"""
FastAPI application entry point.
Mounts routes, middleware (CORS, Prometheus), error handlers and the
startup/shutdown lifecycle (search index, Redis and Elasticsearch clients).
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from rewear.api.v1.router import api_router
from rewear.cache.redis_client import close_redis
from rewear.config import get_settings
from rewear.core.exceptions import ReWearError
from rewear.core.logging_config import configure_logging
from rewear.search.elasticsearch_client import close_elasticsearch, ensure_items_index

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: ensure the Elasticsearch index when ES is available. Shutdown: close clients."""
    configure_logging()
    try:
        await ensure_items_index()
    except Exception as e:
        # ES may be down; the app still works (search returns empty)
        logger.warning("Elasticsearch unavailable at startup: %s", e)
    yield
    await close_redis()
    await close_elasticsearch()


def _validation_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ReWearError)
    async def rewear_error_handler(request: Request, exc: ReWearError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation failed", "errors": _validation_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "message": "Something went wrong"},
        )


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="ReWear: community clothing exchange. List garments, swap them directly or for points.",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS for the web frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Prometheus metrics at /metrics
    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root():
        return {"message": f"{settings.app_name} is running", "docs": "/docs"}

    return app


app = create_app()
