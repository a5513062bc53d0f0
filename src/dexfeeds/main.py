"""FastAPI application entry point.

The service process owns the pollers: on startup it builds the enabled
adapters, warms their caches and starts polling; on shutdown it stops the
pollers and closes the transport and database engine.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from dexfeeds.adapters.factory import build_adapters
from dexfeeds.api.feeds import router as feeds_router
from dexfeeds.cache.sql import SQLCache
from dexfeeds.config import get_settings
from dexfeeds.database import dispose_engine, get_engine, init_db
from dexfeeds.feeds.observers import FeedStats
from dexfeeds.feeds.transport import HttpxTransport
from dexfeeds.logging import ErrorType, configure_logging

logger = structlog.get_logger()


async def refresh_pool_state(adapters, interval_seconds: float) -> None:
    """Periodically re-read poller-written state into each adapter.

    Slave instances never poll, so this is how they pick up token metadata
    refreshed by the master. Failures are logged and retried next round.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        for adapter in adapters:
            try:
                await adapter.update_pool_state()
            except Exception as e:
                logger.warning(
                    "Pool state refresh failed", dex_key=adapter.dex_key, error=str(e)
                )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager for startup/shutdown."""
    # Startup
    settings = get_settings()
    app.state.settings = settings
    configure_logging(json_output=settings.log_json, level=logging.INFO)

    # Initialize database with comprehensive error handling
    try:
        await init_db(get_engine())
    except Exception as e:
        logger.error("Database initialization failed", error=str(e))
        await dispose_engine()
        raise RuntimeError(f"Failed to initialize database: {e}") from e

    cache = SQLCache()
    purged = await cache.purge_expired()
    logger.info("Cache ready", purged_entries=purged)

    transport = HttpxTransport(timeout_seconds=settings.http_timeout_seconds)
    feed_stats = FeedStats()
    app.state.cache = cache
    app.state.transport = transport
    app.state.feed_stats = feed_stats

    try:
        adapters = build_adapters(settings, cache, transport, observers=[feed_stats])
    except Exception as e:
        logger.error(
            "Adapter configuration failed",
            error_type=ErrorType.CONFIGURATION_ERROR,
            error=str(e),
        )
        await transport.aclose()
        await dispose_engine()
        raise
    app.state.adapters = adapters

    for adapter in adapters:
        try:
            await adapter.initialize_pricing()
            logger.info("Pricing initialized", dex_key=adapter.dex_key)
        except Exception as e:
            logger.error(
                "Pricing initialization failed",
                dex_key=adapter.dex_key,
                error=str(e),
            )

    refresh_task = asyncio.create_task(
        refresh_pool_state(adapters, settings.pool_state_refresh_seconds)
    )

    yield

    # Shutdown sequence
    refresh_task.cancel()
    try:
        await refresh_task
    except asyncio.CancelledError:
        pass
    logger.info("Shutdown signal received - stopping pollers")
    for adapter in app.state.adapters:
        try:
            await adapter.release_resources()
            logger.info("Adapter released", dex_key=adapter.dex_key)
        except Exception as e:
            logger.warning("Adapter release failed", dex_key=adapter.dex_key, error=str(e))

    await transport.aclose()
    await dispose_engine()
    logger.info("Database engine disposed")


app = FastAPI(
    title="dexfeeds",
    description="Polling rate fetchers and shared caches for DEX liquidity feeds",
    version="0.1.0",
    lifespan=lifespan,
)

# Mount routers
app.include_router(feeds_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Basic health check endpoint."""
    return {"status": "healthy"}
