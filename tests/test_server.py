import asyncio
import json

import pytest
from aiohttp import WSMsgType
from aiohttp.test_utils import TestClient, TestServer

from driftboard.server import Hub, create_app, port_from_env


@pytest.mark.parametrize(
    "environ, expected",
    [
        ({}, 3000),
        ({"PORT": "8080"}, 8080),
        ({"PORT": "abc"}, 3000),
        ({"PORT": "70000"}, 3000),
        ({"PORT": "-1"}, 3000),
        ({"PORT": " 80"}, 3000),
    ],
)
def test_port_from_env(environ, expected):
    assert port_from_env(environ) == expected


@pytest.mark.asyncio
async def test_hub_delivers_to_all_subscribers():
    hub = Hub()
    a, b = hub.subscribe(), hub.subscribe()
    assert hub.publish("hi") == 2
    assert a.get_nowait() == "hi"
    assert b.get_nowait() == "hi"
    hub.unsubscribe(a)
    assert hub.publish("again") == 1
    assert a.empty()


@pytest.mark.asyncio
async def test_hub_drops_lagging_subscriber():
    hub = Hub(capacity=2)
    queue = hub.subscribe()
    hub.publish("1")
    hub.publish("2")
    assert hub.publish("3") == 0
    assert queue.get_nowait() is None
    assert len(hub) == 0


@pytest.mark.asyncio
async def test_relay_stamps_and_broadcasts():
    async with TestClient(TestServer(create_app())) as client:
        a = await client.ws_connect("/ws")
        b = await client.ws_connect("/ws")
        await a.send_str(json.dumps({"id": "", "color": "c", "x": 0.5, "y": 0.25, "k": 1}))
        got_a = json.loads(await a.receive_str(timeout=2))
        got_b = json.loads(await b.receive_str(timeout=2))
        assert got_a == got_b
        assert got_a["id"] != ""
        assert (got_a["color"], got_a["x"], got_a["y"], got_a["k"]) == ("c", 0.5, 0.25, 1)
        await a.close()
        await b.close()


@pytest.mark.asyncio
async def test_relay_ignores_invalid_packets():
    async with TestClient(TestServer(create_app())) as client:
        ws = await client.ws_connect("/ws")
        await ws.send_str("not a packet")
        await ws.send_str(json.dumps({"id": "x", "color": "c", "x": 0, "y": 1}))
        got = json.loads(await ws.receive_str(timeout=2))
        assert got["color"] == "c"
        assert got["id"] != "x"
        await ws.close()


@pytest.mark.asyncio
async def test_idle_client_is_disconnected():
    async with TestClient(TestServer(create_app(idle_timeout=0.05))) as client:
        ws = await client.ws_connect("/ws")
        msg = await asyncio.wait_for(ws.receive(), timeout=3)
        assert msg.type in (WSMsgType.CLOSE, WSMsgType.CLOSING, WSMsgType.CLOSED)