"""FastAPI dependency injection for shared resources."""

from __future__ import annotations

from incident_radar.services.connection_manager import ConnectionManager

# Singleton connection manager for dashboard WebSocket clients
ui_manager = ConnectionManager()
