"""
SmartPlates FastAPI Application
Meal plan store: weekly plans, recipe lookup, shopping lists and calendar export
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import uvicorn
from contextlib import asynccontextmanager
import anyio

from api.routes import health, plans, recipes
from adapters import mongo_adapter
from app.config import settings
from api.middleware import (
    RequestLoggingMiddleware,
    validation_exception_handler,
    http_exception_handler,
    smartplates_exception_handler,
    general_exception_handler,
)
from app.exceptions import SmartPlatesError

# Setup logging with configured level and format
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)
_logger = logging.getLogger("smartplates.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup and shutdown.
    Connects MongoDB (best-effort) and ensures the plan indexes.
    """
    _logger.info(f"Starting SmartPlates in {settings.environment.value} mode")

    connected = await anyio.to_thread.run_sync(
        mongo_adapter.connect, settings.mongo_uri, settings.mongo_db_name
    )
    if connected:
        try:
            await anyio.to_thread.run_sync(mongo_adapter.ensure_indexes)
        except Exception as e:
            _logger.warning("Failed to ensure MongoDB indexes: %s", e)
    else:
        _logger.warning("MongoDB unavailable; plan routes will fail until it is reachable")

    try:
        yield
    finally:
        _logger.info("Shutting down SmartPlates")
        mongo_adapter.close()


app = FastAPI(
    title=settings.api_title,
    version=settings.app_version,
    description=settings.api_description,
    lifespan=lifespan,
    debug=settings.debug,
    openapi_url=(
        f"{settings.api_prefix}/openapi.json" if not settings.is_production() else None
    ),
    docs_url=f"{settings.api_prefix}/docs" if not settings.is_production() else None,
    redoc_url=f"{settings.api_prefix}/redoc" if not settings.is_production() else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(SmartPlatesError, smartplates_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(health.router, prefix=settings.api_prefix)
app.include_router(plans.router, prefix=settings.api_prefix)
app.include_router(recipes.router, prefix=settings.api_prefix)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
