"""WebSocket server that forwards robot commands to the command queues."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from dataclasses import dataclass
from typing import Optional, Union

from aiohttp import WSCloseCode, WSMsgType, web

from omnibot.commands import CommandError, LedOff, LedOn, SetColor, parse_system_command
from omnibot.controller import CommandChannels

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8000
WS_PROTOCOL = "messages"

I2C_REPLY = "I2C command received and forwarded"
LED_REPLY = "LED command received and forwarded"
INVALID_REPLY = "Invalid command format"


@dataclass
class SessionState:
    """What is known about a client session."""

    last_seen: int


class SessionManager:
    """In-memory store of client sessions keyed by session id."""

    def __init__(self) -> None:
        self._sessions: dict[str, SessionState] = {}

    def create_session(self, session_id: str, timestamp: int) -> None:
        """Create or replace the session ``session_id``."""
        self._sessions[session_id] = SessionState(last_seen=timestamp)

    def get_session(self, session_id: str) -> Optional[SessionState]:
        """Return a copy of the session state, or ``None`` if unknown."""
        state = self._sessions.get(session_id)
        return None if state is None else dataclasses.replace(state)

    def update_session(self, session_id: str, timestamp: int) -> bool:
        """Refresh a session's timestamp; ``False`` if the session is unknown."""
        state = self._sessions.get(session_id)
        if state is None:
            return False
        state.last_seen = timestamp
        return True

    def remove_session(self, session_id: str) -> bool:
        """Remove a session; ``True`` if one was removed."""
        return self._sessions.pop(session_id, None) is not None

    def purge_stale_sessions(self, threshold: int) -> None:
        """Drop every session last seen before ``threshold``."""
        self._sessions = {
            sid: state
            for sid, state in self._sessions.items()
            if state.last_seen >= threshold
        }

    def list_sessions(self) -> list[str]:
        """Ids of the active sessions."""
        return list(self._sessions)


async def dispatch_message(
    payload: Union[str, bytes, bytearray], channels: CommandChannels
) -> str:
    """Decode a command, queue it on the matching channel and return the reply."""
    try:
        command = parse_system_command(payload)
    except CommandError as exc:
        logger.error("error deserializing SystemCommand: %s", exc)
        return INVALID_REPLY
    if isinstance(command, (LedOn, LedOff, SetColor)):
        await channels.led.put(command)
        return LED_REPLY
    await channels.i2c.put(command)
    return I2C_REPLY


def create_app(
    channels: CommandChannels, sessions: Optional[SessionManager] = None
) -> web.Application:
    """Build the web application serving the ``/ws`` command socket."""
    store = SessionManager() if sessions is None else sessions

    async def websocket(request: web.Request) -> web.StreamResponse:
        ws = web.WebSocketResponse(protocols=(WS_PROTOCOL,))
        if not ws.can_prepare(request).ok:
            raise web.HTTPBadRequest(text="Failed to extract WebSocketUpgrade")
        if not request.query_string:
            raise web.HTTPBadRequest(text="Missing query parameters")
        if "session" not in request.query:
            raise web.HTTPBadRequest(text="Invalid query parameters")
        session_id = request.query["session"]
        if not session_id:
            raise web.HTTPBadRequest(text="Session ID is required")

        logger.info("New WebSocket connection with session id: %s", session_id)
        store.create_session(session_id, int(time.monotonic()))

        await ws.prepare(request)
        await ws.send_str("Connected")
        async for msg in ws:
            if msg.type is WSMsgType.TEXT:
                await ws.send_str(await dispatch_message(msg.data, channels))
            elif msg.type is WSMsgType.BINARY:
                reply = await dispatch_message(msg.data, channels)
                await ws.send_bytes(reply.encode())
            elif msg.type is WSMsgType.ERROR:
                logger.error("websocket error: %r", ws.exception())
                await ws.close(
                    code=WSCloseCode.PROTOCOL_ERROR, message=b"Websocket Error"
                )
                break
        logger.info("websocket closed: %s", ws.close_code)
        return ws

    app = web.Application()
    app.router.add_get("/ws", websocket)
    return app


async def run(
    port: int = DEFAULT_PORT,
    channels: Optional[CommandChannels] = None,
    host: str = "0.0.0.0",
) -> None:
    """Serve the application on ``host:port`` until cancelled."""
    if channels is None:
        channels = CommandChannels()
    runner = web.AppRunner(create_app(channels))
    await runner.setup()
    try:
        site = web.TCPSite(runner, host, port)
        await site.start()
        logger.info("Starting server at %s:%s", host, port)
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()