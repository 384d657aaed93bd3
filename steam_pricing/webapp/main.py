"""
FastAPI application entry point for the Steam price cache.

Run with:
    uvicorn steam_pricing.webapp.main:app

Open: http://127.0.0.1:8099/docs
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from steam_pricing.pricing.exceptions import PricingError, StorageFaultError
from steam_pricing.services.health_service import HealthService
from steam_pricing.services.price_cache import PriceCache, build_price_cache
from steam_pricing.utils.config_loader import AppConfig, load_config, load_env
from steam_pricing.utils.logging_config import setup_logging
from steam_pricing.webapp.routes import router
from steam_pricing.webapp.schemas import PriceRecordResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    config: AppConfig = app.state.config
    setup_logging(config.logging)

    logger.info("Steam price cache starting...")
    owns_cache = app.state.price_cache is None
    if owns_cache:
        app.state.price_cache = build_price_cache(config)
        try:
            app.state.price_cache.bootstrap(reset=config.storage.reset_on_start)
        except PricingError as e:
            # Serve anyway; every lookup will report NOT_FOUND until a restart succeeds
            logger.error(f"Error init data about games: {e.message}")

    app.state.health_service = HealthService(config, app.state.price_cache)
    yield

    if owns_cache:
        app.state.price_cache.store.close()
    logger.info("Steam price cache shutting down...")


def create_app(
    config: Optional[AppConfig] = None,
    price_cache: Optional[PriceCache] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Application configuration; loaded from disk when omitted.
        price_cache: Pre-built cache. When omitted one is built from config
            and bootstrapped from the Steam app list at startup.

    Returns:
        FastAPI: Configured application.
    """
    if config is None:
        load_env()
        config = load_config()

    application = FastAPI(
        title="Steam Price Cache",
        description="Per-title Steam pricing with pivot currency conversion",
        version=HealthService.VERSION,
        lifespan=lifespan,
    )
    application.state.config = config
    application.state.price_cache = price_cache

    @application.exception_handler(PricingError)
    async def pricing_error_handler(request: Request, exc: PricingError) -> JSONResponse:
        """Render pricing errors with their own status and error code."""
        content = exc.to_dict()
        if isinstance(exc, StorageFaultError) and exc.record is not None:
            content["record"] = PriceRecordResponse.from_record(exc.record).model_dump()
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_code}")
        return JSONResponse(status_code=exc.status_code, content=content)

    @application.middleware("http")
    async def error_handling_middleware(request: Request, call_next):
        """Global error handling middleware."""
        start_time = time.time()
        try:
            response = await call_next(request)
            process_time = time.time() - start_time
            response.headers["X-Process-Time"] = str(process_time)
            return response
        except Exception as e:
            process_time = time.time() - start_time
            logger.exception(f"Unhandled error processing {request.url.path}: {e}")
            return JSONResponse(
                status_code=500,
                content={
                    "error": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "path": str(request.url.path),
                },
                headers={"X-Process-Time": str(process_time)},
            )

    @application.get("/health")
    async def health_check(request: Request) -> dict[str, Any]:
        """Detailed health check endpoint for monitoring."""
        report = request.app.state.health_service.get_full_health()
        return report.to_dict()

    @application.get("/health/simple")
    async def simple_health_check() -> dict[str, Any]:
        """Simple health check for load balancers."""
        return {
            "status": "ok",
            "timestamp": datetime.utcnow().isoformat(),
        }

    @application.get("/health/ready")
    async def readiness_check(request: Request) -> JSONResponse:
        """Readiness check - verifies records are loaded."""
        price_cache = request.app.state.price_cache
        ready = price_cache is not None and len(price_cache.store) > 0
        return JSONResponse(
            status_code=200 if ready else 503,
            content={
                "status": "ready" if ready else "starting",
                "timestamp": datetime.utcnow().isoformat(),
            },
        )

    application.include_router(router, prefix=config.server.api_prefix.rstrip("/"))
    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=app.state.config.server.host, port=app.state.config.server.port)
