"""Viewer WebSocket endpoint.

Each WebSocket connection is one mounted viewer with its own
RouteBoundLoader. Clients send navigation messages:

    {"type": "navigate", "route": "3"}

and receive every published state:

    {"type": "state", "status": "loaded", "route": "3", "html": "...", "error": null}

Closing the connection tears the loader down.
"""

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any

from aiohttp import WSMsgType, web

from monotone.app_keys import renderer_key, resolver_key, viewers_key
from monotone.core.loader import LoadState, RouteBoundLoader

logger = logging.getLogger(__name__)


def create_viewer_routes() -> list[web.RouteDef]:
    return [web.get("/ws/viewer", handle_viewer)]


async def handle_viewer(request: web.Request) -> web.WebSocketResponse:
    """Handle a viewer WebSocket connection.

    Args:
        request: aiohttp request

    Returns:
        WebSocket response
    """
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    loader = RouteBoundLoader(request.app[resolver_key], request.app[renderer_key])
    viewers = request.app[viewers_key]
    outbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    def publish(state: LoadState) -> None:
        outbox.put_nowait({"type": "state", **state.to_dict()})

    loader.subscribe(publish)
    viewers.add(loader)
    publish(loader.state)

    def unmount() -> None:
        viewers.discard(loader)
        loader.teardown()

    # Sender exit unmounts the viewer
    sender = _start_sender(ws, outbox, on_exit=unmount)
    logger.debug(f"Viewer connected ({len(viewers)} active)")

    try:
        async for msg in ws:
            if loader.torn_down:
                break
            if msg.type == WSMsgType.TEXT:
                error = _handle_message(loader, msg.data)
                if error is not None:
                    outbox.put_nowait({"type": "error", "error": error})
            elif msg.type == WSMsgType.ERROR:
                break
    finally:
        unmount()
        sender.cancel()
        try:
            await sender
        except asyncio.CancelledError:
            pass
        logger.debug(f"Viewer disconnected ({len(viewers)} active)")

    return ws


def _handle_message(loader: RouteBoundLoader, data: str) -> str | None:
    """Apply a client message to the loader.

    Returns:
        Error description for malformed messages, None otherwise
    """
    try:
        message = json.loads(data)
    except ValueError:
        # JSONDecodeError, or an integer beyond the conversion limit
        return "Message must be valid JSON"

    if not isinstance(message, dict):
        return "Message must be an object"
    if message.get("type") != "navigate":
        return f"Unknown message type: {message.get('type')!r}"
    if "route" not in message:
        return "navigate message requires a route"

    route = message["route"]
    if route is not None and (isinstance(route, bool) or not isinstance(route, str | int)):
        return "route must be a string, an integer or null"

    loader.set_route(route)
    return None


def _start_sender(
    ws: web.WebSocketResponse,
    outbox: asyncio.Queue[dict[str, Any]],
    *,
    on_exit: Callable[[], None],
) -> asyncio.Task[None]:
    """Start forwarding the outbox; on_exit runs once the sender stops."""
    sender = asyncio.create_task(_send_loop(ws, outbox))
    sender.add_done_callback(lambda _task: on_exit())
    return sender


async def _send_loop(ws: web.WebSocketResponse, outbox: asyncio.Queue[dict[str, Any]]) -> None:
    """Forward queued messages to the client in publication order."""
    while True:
        payload = await outbox.get()
        if ws.closed:
            return
        try:
            await ws.send_json(payload)
        except ConnectionResetError:
            # Client disconnected mid-send; the receive loop will exit
            return
