# live_scoring/sockets/broadcast.py

"""
Match Room Broadcasts

Every observer of a match sits in room ``match_<matchId>``. Broadcast
failures are logged and never undo a committed update.
"""

import logging

from live_scoring.core import socketio

logger = logging.getLogger(__name__)


def room_for(match_id) -> str:
    return f'match_{match_id}'


class MatchBroadcaster:
    """Emits match state and commentary to a match room."""

    def __init__(self, server=None, namespace: str = '/'):
        self.server = server or socketio
        self.namespace = namespace

    def match_updated(self, sport: str, event_type: str, match):
        self._emit('match_updated', {
            'type': event_type,
            'sport': sport,
            'match': match.to_dict()
        }, match.id)

    def match_commentary(self, sport: str, event_type: str, match, commentary: str):
        self._emit('match_commentary', {
            'type': event_type,
            'sport': sport,
            'match': match.to_dict(),
            'version': match.version,
            'commentary': commentary
        }, match.id)

    def _emit(self, event_name: str, data: dict, match_id):
        room = room_for(match_id)
        try:
            self.server.emit(event_name, data, room=room, namespace=self.namespace)
            logger.debug(f"📤 Emitted {event_name} to room {room}")
        except Exception as e:
            logger.error(f"Error emitting {event_name} to room {room}: {str(e)}", exc_info=True)
