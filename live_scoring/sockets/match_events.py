# live_scoring/sockets/match_events.py

"""
Socket.IO Match Event Handlers

Match room membership and scoring events. Rejections go back to the sender
only, as ``match_error``; accepted events reach the whole room through the
dispatcher's broadcast.
"""

import logging

from flask import request, session
from flask_socketio import emit, join_room, leave_room

from live_scoring.core import get_service, socketio
from live_scoring.services.errors import InvalidEventPayloadError, NotAuthorizedError, ScoringError
from live_scoring.services.sport_resolver import resolve_sport
from live_scoring.sockets.broadcast import room_for

logger = logging.getLogger(__name__)


def _error_payload(code: str, message: str, data) -> dict:
    data = data if isinstance(data, dict) else {}
    return {
        'code': code,
        'message': message,
        'matchId': data.get('matchId'),
        'type': data.get('type')
    }


@socketio.on('join_match', namespace='/')
def handle_join_match(data):
    """Subscribe to a match room. Any authenticated connection may watch."""
    try:
        if not isinstance(data, dict) or not data.get('matchId'):
            raise InvalidEventPayloadError("Match ID is required")
        handle = resolve_sport(data.get('sport'))
        match_id = str(data['matchId'])
        room = room_for(match_id)
        join_room(room)

        metrics = get_service('metrics')
        if metrics:
            metrics.record_room_join()

        emit('joined_match', {'matchId': match_id, 'sport': handle.sport, 'room': room})
        logger.info(f"👥 User {session.get('user_id')} joined {handle.sport} match {match_id} (sid: {request.sid})")
        return {'success': True, 'room': room}

    except ScoringError as e:
        emit('match_error', _error_payload(e.error_code, e.message, data))
        return {'success': False, **e.to_dict()}


@socketio.on('leave_match', namespace='/')
def handle_leave_match(data):
    if not isinstance(data, dict) or not data.get('matchId'):
        emit('match_error', _error_payload(InvalidEventPayloadError.error_code, "Match ID is required", data))
        return {'success': False}
    room = room_for(data['matchId'])
    leave_room(room)
    logger.info(f"👋 User {session.get('user_id')} left match {data['matchId']} (sid: {request.sid})")
    return {'success': True}


def handle_scoring_event(data):
    """
    Run one scoring event through the dispatcher on behalf of this connection.

    The acknowledgement carries the saved version on success and the error
    code on rejection.
    """
    try:
        user_id = session.get('user_id')
        if not user_id:
            raise NotAuthorizedError("Authentication required")
        match = get_service('dispatcher').handle_wire_event(data, actor_id=user_id)
        return {'success': True, 'matchId': match.id, 'version': match.version}

    except ScoringError as e:
        emit('match_error', _error_payload(e.error_code, e.message, data))
        return {'success': False, **e.to_dict()}

    except Exception as e:
        logger.error(f"Error handling scoring event {data!r}: {str(e)}", exc_info=True)
        emit('match_error', _error_payload('INTERNAL_ERROR', 'Failed to process event', data))
        return {'success': False, 'code': 'INTERNAL_ERROR', 'message': 'Failed to process event'}


@socketio.on('match_event', namespace='/')
def handle_match_event(data):
    return handle_scoring_event(data)


@socketio.on('update_score', namespace='/')
def handle_update_score(data):
    """Older clients send ``{matchId, sport, payload}`` without a type."""
    if isinstance(data, dict) and not data.get('type'):
        payload = data.get('payload') if isinstance(data.get('payload'), dict) else {}
        data = {**data, 'type': 'rally' if payload.get('eventType') else 'score'}
    return handle_scoring_event(data)
