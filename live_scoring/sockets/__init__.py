# live_scoring/sockets/__init__.py

"""
Socket Modules Package

Realtime transport for live scoring: connection authentication, match room
membership, scoring events and the room broadcaster the dispatcher uses.
"""

from .broadcast import MatchBroadcaster, room_for


def register_socket_handlers():
    """
    Register all Socket.IO event handlers.

    Importing the handler modules runs their ``@socketio.on`` decorators.
    """
    from . import auth  # JWT auth and connect/disconnect handlers
    from . import match_events  # Match rooms and scoring events


__all__ = ['MatchBroadcaster', 'room_for', 'register_socket_handlers']
