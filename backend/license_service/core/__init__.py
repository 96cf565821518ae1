# license_service/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- db: Database configuration and connection management
- protocol: License WebSocket text protocol and CHECK_KEY parser
- validity: License validity rules
- registry: Set of open WebSocket sessions
- heartbeat: Ping/pong liveness monitor
- session: Per-connection session handler
"""
