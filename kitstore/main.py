# kitstore/main.py
import asyncio
from contextlib import asynccontextmanager
from pathlib import Path

import redis
import redis.asyncio as aioredis
import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from kitstore.api.errors import register_error_handlers
from kitstore.api.routers import carts, health, products, realtime, views
from kitstore.data.database import init_db
from kitstore.services.event_publisher import ProductsHub, RedisEventPublisher, relay_events
from kitstore.utils.settings import EVENTS_BACKEND, EVENTS_CHANNEL, HOST, PORT, REDIS_URL
from kitstore.utils.logging import get_logger

logger = get_logger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()

    if EVENTS_BACKEND != "redis":
        yield
        return

    # every process subscribes and pushes what it hears to its own sockets
    client = aioredis.from_url(REDIS_URL, decode_responses=True)
    pubsub = client.pubsub()
    await pubsub.subscribe(EVENTS_CHANNEL)
    relay = asyncio.create_task(relay_events(pubsub, app.state.hub))
    logger.info(f"Relaying events from redis channel {EVENTS_CHANNEL}")
    try:
        yield
    finally:
        relay.cancel()
        try:
            await relay
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Event relay stopped with an error")

        try:
            await pubsub.unsubscribe(EVENTS_CHANNEL)
        except redis.RedisError as e:
            logger.error(f"Error unsubscribing from {EVENTS_CHANNEL}: {e}")
        await pubsub.aclose()
        await client.aclose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Kit Store",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.hub = ProductsHub()
    if EVENTS_BACKEND == "redis":
        app.state.publisher = RedisEventPublisher(
            redis.Redis.from_url(REDIS_URL, decode_responses=True),
            EVENTS_CHANNEL,
        )
    else:
        app.state.publisher = app.state.hub

    register_error_handlers(app)
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    # Include routers
    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(views.router)
    app.include_router(realtime.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host=HOST, port=PORT)
