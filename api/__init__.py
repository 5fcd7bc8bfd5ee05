"""API module for the lesson catalog and session control."""
from .routes import create_app
from .websocket import WebSocketManager, ws_manager

__all__ = ["create_app", "WebSocketManager", "ws_manager"]
