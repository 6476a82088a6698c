# live_scoring/core/__init__.py

"""
Core Application Module

This module initializes the shared extensions used across the scoring engine:
  - SQLAlchemy for the match document store
  - SocketIO for real-time match rooms
  - JWTManager for bearer-token verification

Extensions are created unbound here and attached to the Flask app in
``create_app`` so tests can build isolated application instances.
"""

from flask_jwt_extended import JWTManager
from flask_socketio import SocketIO
from flask_sqlalchemy import SQLAlchemy

# Initialize core components
db = SQLAlchemy()
jwt = JWTManager()

# async_handlers=False keeps events from one connection in arrival order.
socketio = SocketIO(
    cors_allowed_origins="*",
    async_handlers=False,
    ping_timeout=60,
    ping_interval=25,
    logger=False,
    engineio_logger=False
)


def get_service(name: str):
    """Return a scoring service wired into the current app by ``create_app``."""
    from flask import current_app
    return current_app.extensions['live_scoring'][name]
