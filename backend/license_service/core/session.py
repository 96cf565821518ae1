# license_service/core/session.py
"""
License WebSocket session.

One session per accepted connection. The session reads frames one at a time,
answers CHECK_KEY requests from the license store and runs a HeartbeatMonitor
as an owned child task. Whatever ends the session (QUIT, client close,
transport error, heartbeat expiry), the same teardown runs: unregister, stop
the monitor, close the socket if still open.
"""
import asyncio
import logging
import uuid
from enum import Enum
from typing import Awaitable, Callable, Optional

from starlette.websockets import WebSocket

from license_service.core.heartbeat import HeartbeatMonitor, is_open
from license_service.core.protocol import (
    PONG,
    QUIT,
    NORMAL_CLOSURE,
    CLOSE_REASON_DEFAULT,
    MalformedCommand,
    CheckKeyCommand,
    is_check_key,
    parse_check_key,
)
from license_service.core.registry import ConnectionRegistry
from license_service.core.validity import evaluate, utc_now
from license_service.models.license_key import LicenseKey

logger = logging.getLogger("uvicorn.error")

LicenseLookup = Callable[[str, str], Awaitable[Optional[LicenseKey]]]


class SessionState(str, Enum):
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class LicenseSession:
    def __init__(
        self,
        ws: WebSocket,
        registry: ConnectionRegistry,
        heartbeat_interval: float = 30.0,
        lookup: Optional[LicenseLookup] = None,
        clock=utc_now,
    ):
        self.id = uuid.uuid4().hex[:8]
        self.ws = ws
        self.registry = registry
        self.state = SessionState.OPEN
        self._stop = asyncio.Event()
        self.heartbeat = HeartbeatMonitor(ws, heartbeat_interval, self._stop)
        self._lookup = lookup or LicenseKey.find_for_app
        self._clock = clock
        self._reader: Optional[asyncio.Task] = None
        self._monitor: Optional[asyncio.Task] = None

    def __repr__(self) -> str:
        return f"<LicenseSession {self.id} {self.state.value}>"

    async def run(self) -> None:
        """
        Serve the connection until it ends, then tear it down.

        The connection must already be accepted. Returns once the session has
        reached CLOSED; never raises for protocol or transport errors.
        """
        self.registry.register(self)
        logger.info("[ws_license] session %s opened (connections=%d)", self.id, len(self.registry))

        self._reader = asyncio.create_task(self._read_loop())
        self._monitor = asyncio.create_task(self.heartbeat.run())
        try:
            await asyncio.wait({self._reader, self._monitor}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            await self._teardown()

    async def _read_loop(self) -> None:
        try:
            while self.state is SessionState.OPEN:
                message = await self.ws.receive()
                if message["type"] == "websocket.disconnect":
                    logger.info("[ws_license] session %s closed by client (code=%s)", self.id, message.get("code"))
                    break

                text = message.get("text")
                if text is None:
                    continue  # Binary frames are not part of the protocol

                logger.debug("[ws_license] session %s received: %s", self.id, text)
                if not await self._handle_text(text):
                    break
        except Exception:
            logger.exception("[ws_license] session %s error while reading", self.id)
        finally:
            self.state = SessionState.CLOSING

    async def _handle_text(self, text: str) -> bool:
        """Process one text frame. Returns False when the session should end."""
        if text == PONG:
            self.heartbeat.acknowledge()
            return True

        if text == QUIT:
            logger.info("[ws_license] session %s sent QUIT", self.id)
            return False

        if is_check_key(text):
            try:
                command = parse_check_key(text)
            except MalformedCommand as e:
                # Malformed requests are dropped without a reply
                logger.debug("[ws_license] session %s ignored malformed frame: %s", self.id, e)
                return True
            await self._check_key(command)

        return True

    async def _check_key(self, command: CheckKeyCommand) -> None:
        try:
            record = await self._lookup(command.app_name, command.key)
        except Exception:
            # Store failure affects this request only; the session stays open
            logger.exception("[ws_license] session %s license lookup failed app=%s", self.id, command.app_name)
            return

        status = evaluate(record, self._clock())
        await self.ws.send_text(status.value)

    async def _teardown(self) -> None:
        self.state = SessionState.CLOSING

        # Unregister before the first await so membership never outlives the session
        try:
            self.registry.unregister(self)
        except Exception:
            logger.exception("[ws_license] session %s failed to unregister", self.id)

        # Child tasks are stopped before the first await as well, so a second
        # cancellation of this task cannot leave the heartbeat running
        self._stop.set()
        for task in (self._reader, self._monitor):
            if not task.done():
                task.cancel()

        try:
            await asyncio.gather(self._reader, self._monitor, return_exceptions=True)

            if is_open(self.ws):
                try:
                    await self.ws.close(code=NORMAL_CLOSURE, reason=CLOSE_REASON_DEFAULT)
                except Exception:
                    logger.warning("[ws_license] session %s close failed", self.id, exc_info=True)
        finally:
            self.state = SessionState.CLOSED
            logger.info(
                "[ws_license] session %s closed (heartbeat_expired=%s, connections=%d)",
                self.id, self.heartbeat.expired, len(self.registry),
            )
