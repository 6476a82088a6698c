# live_scoring/routes.py

"""
Scoring HTTP Endpoints

Small JWT-protected REST surface next to the Socket.IO transport:

- POST /api/matches                  create a match
- GET  /api/matches/<sport>/<id>     read a match
- POST /api/matches/<id>/cancel      cancel a match
- GET  /api/leaderboard?sport=       top players of a sport
- GET  /metrics                      Prometheus metrics
"""

import logging

from flask import Blueprint, Response, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from live_scoring.core import get_service
from live_scoring.services.errors import (
    MatchBusyError, MatchClosedError, MatchNotFoundError, MatchNotLiveError, NotAuthorizedError,
    PersistenceError, ScoringError, VersionConflictError
)

logger = logging.getLogger(__name__)

scoring_bp = Blueprint('scoring', __name__)

_STATUS_CODES = {
    NotAuthorizedError: 403,
    MatchNotFoundError: 404,
    MatchClosedError: 409,
    MatchNotLiveError: 409,
    MatchBusyError: 409,
    VersionConflictError: 409,
    PersistenceError: 503,
}


def _status_for(error: ScoringError) -> int:
    for error_type, status in _STATUS_CODES.items():
        if isinstance(error, error_type):
            return status
    return 400


@scoring_bp.errorhandler(ScoringError)
def handle_scoring_error(error: ScoringError):
    return jsonify({'success': False, 'message': error.message, 'error_code': error.error_code}), _status_for(error)


@scoring_bp.route('/api/matches', methods=['POST'])
@jwt_required()
def create_match():
    data = request.get_json(silent=True) or {}
    match = get_service('matches').create_match(data, created_by=get_jwt_identity())
    return jsonify({
        'success': True,
        'data': match.to_dict(),
        'message': 'Match created successfully'
    }), 201


@scoring_bp.route('/api/matches/<sport>/<match_id>', methods=['GET'])
@jwt_required()
def get_match(sport, match_id):
    match = get_service('matches').get_match(sport, match_id)
    return jsonify({'success': True, 'data': match.to_dict()})


@scoring_bp.route('/api/matches/<match_id>/cancel', methods=['POST'])
@jwt_required()
def cancel_match(match_id):
    data = request.get_json(silent=True) or {}
    match = get_service('matches').cancel_match(match_id, get_jwt_identity(), reason=data.get('reason'))
    return jsonify({'success': True, 'data': match.to_dict(), 'message': 'Match cancelled'})


@scoring_bp.route('/api/leaderboard', methods=['GET'])
@jwt_required()
def leaderboard():
    sport = request.args.get('sport')
    limit = request.args.get('limit', type=int)
    rows = get_service('leaderboard').leaderboard(sport, limit=limit)
    return jsonify({'success': True, 'sport': sport.strip().lower(), 'data': rows})


@scoring_bp.route('/metrics', methods=['GET'])
def metrics():
    return Response(get_service('metrics').get_metrics_text(), mimetype='text/plain; version=0.0.4')
