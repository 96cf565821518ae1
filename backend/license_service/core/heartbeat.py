# license_service/core/heartbeat.py
"""
Heartbeat monitor for license WebSocket sessions.
Sends a "ping" text frame every interval and closes the connection when the
client did not answer the previous probe with "pong".
"""
import asyncio
import logging

from starlette.websockets import WebSocket, WebSocketState

from license_service.core.protocol import PING, NORMAL_CLOSURE, CLOSE_REASON_NO_PONG

logger = logging.getLogger("uvicorn.error")


def is_open(ws: WebSocket) -> bool:
    """True while neither side has closed the connection."""
    return (
        ws.client_state == WebSocketState.CONNECTED
        and ws.application_state == WebSocketState.CONNECTED
    )


class HeartbeatMonitor:
    """
    Per-session liveness checker.

    Every `interval` seconds, while the connection is open:
      - if no "pong" arrived since the last probe, the peer is considered dead:
        the connection is closed (1000, "PONG not received") and `stop` is set
      - otherwise the acknowledgment flag is cleared and "ping" is sent

    The session owns the monitor and shares `stop` with it. Setting `stop`
    ends `run()` immediately instead of at the next tick.
    """
    def __init__(self, ws: WebSocket, interval: float, stop: asyncio.Event):
        self.ws = ws
        self.interval = interval
        self._stop = stop
        self.acknowledged = True  # First probe is always sent
        self.expired = False

    def acknowledge(self) -> None:
        """Record a "pong" from the client."""
        self.acknowledged = True

    async def _next_tick(self) -> bool:
        # True when the interval elapsed, False when stop was requested
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=self.interval)
        except asyncio.TimeoutError:
            return True
        return False

    async def run(self) -> None:
        while await self._next_tick():
            if not is_open(self.ws):
                return

            if not self.acknowledged:
                self.expired = True
                logger.warning("[heartbeat] pong not received within %.1fs, closing connection", self.interval)
                try:
                    await self.ws.close(code=NORMAL_CLOSURE, reason=CLOSE_REASON_NO_PONG)
                except Exception:
                    logger.exception("[heartbeat] failed to close unresponsive connection")
                self._stop.set()
                return

            self.acknowledged = False
            try:
                await self.ws.send_text(PING)
            except Exception:
                logger.exception("[heartbeat] failed to send ping")
                self._stop.set()
                return
