# license_service/api/v1/routers/ws_license.py
from fastapi import APIRouter, WebSocket

from license_service.core.session import LicenseSession

router = APIRouter()

@router.websocket("/")
@router.websocket("/ws/license")
async def ws_license(ws: WebSocket):
    """
    WebSocket endpoint for license validation.

    Client applications keep this connection open and check their license
    key over it. The server probes the client with "ping" every heartbeat
    interval and expects "pong" back.

    Message flow:
    1. Client connects to WebSocket
    2. Client sends: "CHECK_KEY:<appName>,<key>"
    3. Server replies: "VALID_KEY" | "EXPIRED_KEY" | "INVALID_KEY"
    4. Server sends "ping" periodically, client answers "pong"
    5. Client sends "QUIT" (or a close frame) to end the session

    Args:
        ws: WebSocket connection object

    Note:
        Two heartbeat intervals without "pong" close the connection with
        reason "PONG not received".
    """
    await ws.accept()
    session = LicenseSession(
        ws,
        registry=ws.app.state.connections,
        heartbeat_interval=ws.app.state.heartbeat_interval,
    )
    await session.run()
