# kitstore/services/event_publisher.py
import asyncio
import json
from typing import Any, Dict, Protocol, Tuple

import redis

from kitstore.utils.retry import reconnect_retry, redis_retry
from kitstore.utils.logging import get_logger

logger = get_logger(__name__)

PRODUCTS_CHANGE = "productsChange"


class EventPublisher(Protocol):
    def publish(self, event: str, payload: Any) -> None:
        ...


class ProductsHub:
    """
    Registry of websocket connections of this process.

    publish() may be called from any thread (sync route handlers run in the
    threadpool), so messages are handed to each connection's loop with
    call_soon_threadsafe.
    """

    def __init__(self):
        self._queues: Dict[int, Tuple[asyncio.AbstractEventLoop, asyncio.Queue]] = {}

    def connect(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self._queues[id(queue)] = (asyncio.get_running_loop(), queue)
        logger.info(f"Socket client connected, {len(self._queues)} connected")
        return queue

    def disconnect(self, queue: asyncio.Queue) -> None:
        self._queues.pop(id(queue), None)
        logger.info(f"Socket client disconnected, {len(self._queues)} connected")

    @property
    def connections(self) -> int:
        return len(self._queues)

    def publish(self, event: str, payload: Any) -> None:
        message = {"event": event, "payload": payload}
        for key, (loop, queue) in list(self._queues.items()):
            try:
                loop.call_soon_threadsafe(queue.put_nowait, message)
            except RuntimeError:
                # loop of a client that went away without disconnecting
                logger.warning("Dropping socket client with closed event loop")
                self._queues.pop(key, None)


class RedisEventPublisher:
    """Publishes events on a Redis channel, every process relays them to its own hub."""

    def __init__(self, client: redis.Redis, channel: str):
        self.redis = client
        self.channel = channel

    @redis_retry()
    def publish(self, event: str, payload: Any) -> None:
        logger.info(f"Publish {event} on {self.channel}")
        self.redis.publish(self.channel, json.dumps({"event": event, "payload": payload}))


@reconnect_retry()
async def relay_events(pubsub, hub: ProductsHub) -> None:
    """
    Forward messages of a subscribed redis.asyncio PubSub to the local hub.

    A lost connection is logged and listening starts again; the PubSub
    reconnects and resubscribes its channels on the next read.
    """
    async for message in pubsub.listen():
        if message.get("type") != "message":
            continue
        try:
            data = json.loads(message["data"])
            event, payload = data["event"], data["payload"]
        except (TypeError, ValueError, KeyError) as e:
            logger.warning(f"Ignoring malformed event message: {e}")
            continue
        hub.publish(event, payload)
