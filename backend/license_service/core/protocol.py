# license_service/core/protocol.py
"""
Text protocol spoken over the license WebSocket.

Server -> client: "ping", "VALID_KEY" / "EXPIRED_KEY" / "INVALID_KEY"
Client -> server: "pong", "QUIT", "CHECK_KEY:<appName>,<key>"
"""
from __future__ import annotations

from typing import NamedTuple

PING = "ping"
PONG = "pong"
QUIT = "QUIT"
CHECK_KEY_PREFIX = "CHECK_KEY:"

NORMAL_CLOSURE = 1000
CLOSE_REASON_NO_PONG = "PONG not received"
CLOSE_REASON_DEFAULT = "Connection closed"


class MalformedCommand(ValueError):
    """Raised when a CHECK_KEY frame does not carry exactly `appName,key`."""


class CheckKeyCommand(NamedTuple):
    app_name: str
    key: str


def is_check_key(payload: str) -> bool:
    return payload.startswith(CHECK_KEY_PREFIX)


def parse_check_key(payload: str) -> CheckKeyCommand:
    """
    Parse a "CHECK_KEY:<appName>,<key>" frame.

    Both fields are stripped of surrounding whitespace.

    Raises:
        MalformedCommand: if the frame has no CHECK_KEY prefix or the remainder
            does not split into exactly two comma separated fields.
    """
    if not is_check_key(payload):
        raise MalformedCommand(f"not a {CHECK_KEY_PREFIX} frame")
    fields = payload[len(CHECK_KEY_PREFIX):].strip().split(",")
    if len(fields) != 2:
        raise MalformedCommand(f"expected 2 fields, got {len(fields)}")
    app_name, key = (f.strip() for f in fields)
    return CheckKeyCommand(app_name=app_name, key=key)
