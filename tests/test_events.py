"""
Tests for the realtime product channel: the local hub, the websocket
endpoint, and the Redis publisher and relay used when running several
processes.
"""
import asyncio
import json
import threading
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import redis
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient
from tenacity import wait_none

from kitstore import main
from kitstore.api.routers.realtime import products_socket
from kitstore.services.event_publisher import (
    PRODUCTS_CHANGE,
    ProductsHub,
    RedisEventPublisher,
    relay_events,
)


class FakePubSub:
    def __init__(self, messages):
        self.messages = messages

    async def listen(self):
        for message in self.messages:
            yield message


class FlakyPubSub(FakePubSub):
    """Loses the connection on the first listen, like a Redis restart."""

    def __init__(self, messages):
        super().__init__(messages)
        self.listens = 0

    async def listen(self):
        self.listens += 1
        if self.listens == 1:
            raise redis.ConnectionError("Connection closed by server.")
        for message in self.messages:
            yield message


class DeadPubSub:
    def __init__(self):
        self.closed = False

    async def subscribe(self, *channels):
        pass

    async def unsubscribe(self, *channels):
        raise redis.ConnectionError("Connection closed by server.")

    async def listen(self):
        raise RuntimeError("listener crashed")
        yield

    async def aclose(self):
        self.closed = True


class FakeRedisClient:
    def __init__(self, pubsub):
        self._pubsub = pubsub
        self.closed = False

    def pubsub(self):
        return self._pubsub

    async def aclose(self):
        self.closed = True


class ClosedSocket:
    """Websocket whose peer vanished: sending fails, then the disconnect arrives."""

    def __init__(self, app):
        self.app = app
        self.gone = asyncio.Event()

    async def accept(self):
        pass

    async def send_json(self, data):
        self.gone.set()
        raise RuntimeError('Cannot call "send" once a close message has been sent.')

    async def receive_text(self):
        await self.gone.wait()
        raise WebSocketDisconnect(code=1006)


def test_hub_delivers_from_other_threads():
    hub = ProductsHub()

    async def scenario():
        queue = hub.connect()
        worker = threading.Thread(target=hub.publish, args=(PRODUCTS_CHANGE, [{"id": "1"}]))
        worker.start()
        worker.join()
        return await asyncio.wait_for(queue.get(), timeout=1)

    message = asyncio.run(scenario())

    assert message == {"event": "productsChange", "payload": [{"id": "1"}]}


def test_hub_disconnect_stops_delivery():
    hub = ProductsHub()

    async def scenario():
        queue = hub.connect()
        hub.disconnect(queue)
        hub.publish(PRODUCTS_CHANGE, [])
        await asyncio.sleep(0)
        return queue.empty()

    assert asyncio.run(scenario()) is True
    assert hub.connections == 0


def test_websocket_receives_product_list(test_client: TestClient, product_payload):
    with test_client.websocket_connect("/ws") as websocket:
        response = test_client.post("/api/products", json=product_payload(title="Camiseta en vivo"))
        message = websocket.receive_json()

    assert message["event"] == "productsChange"
    [product] = message["payload"]
    assert product["id"] == response.json()["id"]
    assert product["title"] == "Camiseta en vivo"


def test_redis_publisher_sends_json_on_channel():
    client = MagicMock()
    publisher = RedisEventPublisher(client, "kitstore:events")

    publisher.publish(PRODUCTS_CHANGE, [{"id": "1"}])

    client.publish.assert_called_once_with(
        "kitstore:events",
        json.dumps({"event": "productsChange", "payload": [{"id": "1"}]}),
    )


def test_redis_publisher_retries_connection_errors():
    client = MagicMock()
    client.publish.side_effect = [redis.ConnectionError("down"), 1]
    publisher = RedisEventPublisher(client, "kitstore:events")

    publisher.publish(PRODUCTS_CHANGE, [])

    assert client.publish.call_count == 2


def test_redis_publisher_gives_up_after_three_attempts():
    client = MagicMock()
    client.publish.side_effect = redis.ConnectionError("down")
    publisher = RedisEventPublisher(client, "kitstore:events")

    with pytest.raises(redis.ConnectionError):
        publisher.publish(PRODUCTS_CHANGE, [])
    assert client.publish.call_count == 3


def test_relay_forwards_only_valid_messages():
    hub = ProductsHub()
    event = {"event": "productsChange", "payload": [{"id": "1"}]}
    pubsub = FakePubSub(
        [
            {"type": "subscribe", "data": 1},
            {"type": "message", "data": "not json"},
            {"type": "message", "data": json.dumps({"payload": []})},
            {"type": "message", "data": json.dumps(event)},
        ]
    )

    async def scenario():
        queue = hub.connect()
        await relay_events(pubsub, hub)
        await asyncio.sleep(0)
        received = []
        while not queue.empty():
            received.append(queue.get_nowait())
        return received

    assert asyncio.run(scenario()) == [event]


def test_relay_resumes_after_lost_connection(caplog):
    hub = ProductsHub()
    event = {"event": "productsChange", "payload": []}
    pubsub = FlakyPubSub([{"type": "message", "data": json.dumps(event)}])

    async def scenario():
        queue = hub.connect()
        await relay_events.retry_with(wait=wait_none())(pubsub, hub)
        await asyncio.sleep(0)
        return queue.get_nowait()

    assert asyncio.run(scenario()) == event
    assert pubsub.listens == 2
    assert "Connection closed by server." in caplog.text


def test_shutdown_closes_redis_after_relay_died(monkeypatch):
    pubsub = DeadPubSub()
    client = FakeRedisClient(pubsub)
    monkeypatch.setattr(main, "EVENTS_BACKEND", "redis")
    monkeypatch.setattr(main.aioredis, "from_url", lambda *args, **kwargs: client)

    with TestClient(main.create_app()) as test_client:
        assert test_client.get("/health").status_code == 200

    assert pubsub.closed is True
    assert client.closed is True


def test_socket_handler_survives_failed_send():
    hub = ProductsHub()
    socket = ClosedSocket(SimpleNamespace(state=SimpleNamespace(hub=hub)))

    async def scenario():
        handler = asyncio.create_task(products_socket(socket))
        while hub.connections == 0:
            await asyncio.sleep(0)
        hub.publish(PRODUCTS_CHANGE, [])
        await asyncio.wait_for(handler, timeout=1)

    asyncio.run(scenario())

    assert hub.connections == 0
