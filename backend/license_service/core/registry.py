# license_service/core/registry.py
"""
Connection registry for open license WebSocket sessions.
Keeps track of which sessions are currently connected so the service can
account for them (connection count in /ping, logs).
"""
import threading
from typing import Hashable, Set


class ConnectionRegistry:
    """
    Set of currently open sessions.

    Architecture:
    - The WebSocket router accepts the connection; the session registers itself
      once it is open and unregisters on every exit path
    - The registry never owns a session, it only records membership
    - register/unregister are atomic and may be called from any number of
      sessions at the same time

    Data structure:
    - _sessions: Set[session]
    """
    def __init__(self):
        self._sessions: Set[Hashable] = set()
        self._lock = threading.Lock()

    def register(self, session: Hashable) -> None:
        """
        Add an open session.

        Args:
            session: Session handle to record
        """
        with self._lock:
            self._sessions.add(session)

    def unregister(self, session: Hashable) -> bool:
        """
        Remove a session. Removing a session that is not registered is a no-op.

        Args:
            session: Session handle to remove

        Returns:
            bool: True if the session was registered
        """
        with self._lock:
            if session in self._sessions:
                self._sessions.remove(session)
                return True
            return False

    def snapshot(self) -> frozenset:
        """Point-in-time copy of the registered sessions."""
        with self._lock:
            return frozenset(self._sessions)

    def __contains__(self, session: Hashable) -> bool:
        with self._lock:
            return session in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
