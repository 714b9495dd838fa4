"""WebSocket relay: every client's packets are stamped and fanned out to all."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import os
import re
import uuid
from collections.abc import Mapping

from aiohttp import WSMsgType, web

from driftboard.packet import Packet, PacketError

DEFAULT_PORT = 3000
CHANNEL_CAPACITY = 1_024
IDLE_TIMEOUT = 60.0 * 5


class Hub:
    """A broadcast channel; subscribers that fall too far behind are dropped."""

    def __init__(self, capacity: int = CHANNEL_CAPACITY) -> None:
        self.capacity = capacity
        self._queues: set[asyncio.Queue] = set()

    def __len__(self) -> int:
        return len(self._queues)

    def subscribe(self) -> asyncio.Queue:
        """A queue receiving every later message; ``None`` marks being dropped."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.capacity + 1)
        self._queues.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._queues.discard(queue)

    def publish(self, message: str) -> int:
        """Deliver to all subscribers; returns how many received it."""
        delivered = 0
        for queue in list(self._queues):
            if queue.qsize() >= self.capacity:
                while not queue.empty():
                    queue.get_nowait()
                queue.put_nowait(None)
                self._queues.discard(queue)
                continue
            queue.put_nowait(message)
            delivered += 1
        return delivered


_HUB = web.AppKey("hub", Hub)
_IDLE = web.AppKey("idle_timeout", float)


async def _fan_out(queue: asyncio.Queue, ws: web.WebSocketResponse) -> None:
    while True:
        message = await queue.get()
        if message is None:
            return
        try:
            await ws.send_str(message)
        except (ConnectionError, RuntimeError):
            return


async def _fan_in(ws: web.WebSocketResponse, hub: Hub, client_id: str, touch) -> None:
    async for msg in ws:
        if msg.type != WSMsgType.TEXT:
            return
        touch()
        try:
            pkt = Packet.from_json(msg.data)
        except PacketError:
            continue
        hub.publish(pkt.with_id(client_id).to_json())


async def _watchdog(idle_timeout: float, idle_for) -> None:
    while True:
        await asyncio.sleep(idle_timeout)
        if idle_for() > idle_timeout:
            return


async def _ws_handler(request: web.Request) -> web.WebSocketResponse:
    app = request.app
    hub = app[_HUB]
    idle_timeout = app[_IDLE]
    loop = asyncio.get_running_loop()
    client_id = str(uuid.uuid4())
    last_seen = loop.time()

    def touch() -> None:
        nonlocal last_seen
        last_seen = loop.time()

    queue = hub.subscribe()
    ws = web.WebSocketResponse()
    try:
        await ws.prepare(request)
        tasks = [
            asyncio.create_task(_fan_out(queue, ws)),
            asyncio.create_task(_fan_in(ws, hub, client_id, touch)),
            asyncio.create_task(_watchdog(idle_timeout, lambda: loop.time() - last_seen)),
        ]
        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in tasks:
                task.cancel()
            for task in tasks:
                with contextlib.suppress(asyncio.CancelledError, Exception):
                    await task
    finally:
        hub.unsubscribe(queue)
        await ws.close()
    return ws


def port_from_env(environ: Mapping[str, str] | None = None) -> int:
    """The port from ``PORT`` when it is a valid port number, else 3000."""
    env = os.environ if environ is None else environ
    value = env.get("PORT")
    if value is not None and re.fullmatch(r"\+?[0-9]+", value):
        port = int(value)
        if port <= 65_535:
            return port
    return DEFAULT_PORT


def create_app(idle_timeout: float = IDLE_TIMEOUT) -> web.Application:
    """The relay application serving the ``/ws`` endpoint."""
    app = web.Application()
    app[_HUB] = Hub()
    app[_IDLE] = float(idle_timeout)
    app.router.add_get("/ws", _ws_handler)
    return app


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="driftboard", description="Run the relay server.")
    parser.parse_args(argv)
    web.run_app(create_app(), host="0.0.0.0", port=port_from_env())