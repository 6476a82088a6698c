# live_scoring/services/match_management.py

"""
Match Management Service

Administrative operations around scoring: creating a match with its sport's
rule defaults, reading it back, and cancelling it.
"""

import logging
from typing import Any, Dict, Optional

from live_scoring.models import BaseMatch
from live_scoring.models.base import new_id
from live_scoring.services.errors import InvalidEventPayloadError, MatchNotFoundError, NotAuthorizedError
from live_scoring.services.sport_resolver import resolve_sport

logger = logging.getLogger(__name__)

# Fields a client may not set when creating a match
_SERVER_FIELDS = ('_id', 'id', 'status', 'winner', 'feed', 'version', 'createdAt', 'updatedAt', 'createdBy')


class MatchManagementService:

    def __init__(self, repository, locks, broadcaster=None):
        self.repository = repository
        self.locks = locks
        self.broadcaster = broadcaster

    def create_match(self, data: Dict[str, Any], created_by) -> BaseMatch:
        """
        Create a scheduled match from a client payload.

        Teams without an id get one; when no scorers are named the creator is
        the only scorer. The first game, set or period is opened by the sport
        model itself.
        """
        if not isinstance(data, dict):
            raise InvalidEventPayloadError("Match payload must be an object")
        handle = resolve_sport(data.get('sport'))

        teams = data.get('teams')
        if not isinstance(teams, list) or len(teams) != 2:
            raise InvalidEventPayloadError("A match needs exactly two teams")
        for team in teams:
            if not isinstance(team, dict) or not team.get('name'):
                raise InvalidEventPayloadError("Every team needs a name")

        document = {key: value for key, value in data.items() if key not in _SERVER_FIELDS}
        document['sport'] = handle.sport
        document['_id'] = new_id()
        document['teams'] = [
            {**team, '_id': str(team.get('_id') or team.get('id') or new_id())}
            for team in teams
        ]
        if document['teams'][0]['_id'] == document['teams'][1]['_id']:
            raise InvalidEventPayloadError("The two teams must be different")
        creator = str(created_by) if created_by is not None else None
        document['createdBy'] = creator
        document['scoringUpdatedBy'] = [str(uid) for uid in data.get('scoringUpdatedBy') or []] or (
            [creator] if creator else []
        )

        try:
            match = handle.match_class.from_dict(document)
        except (TypeError, ValueError, KeyError) as e:
            raise InvalidEventPayloadError(f"Invalid match: {e}")
        match = self.repository.create(match)
        logger.info(f"🆕 {handle.sport} match {match.id} created by {creator}")
        return match

    def get_match(self, sport: str, match_id) -> BaseMatch:
        handle = resolve_sport(sport)
        match = self.repository.find_by_id(match_id, handle.record_class)
        if match is None:
            raise MatchNotFoundError(f"Match {match_id} not found")
        return match

    def cancel_match(self, match_id, actor_id, reason: Optional[str] = None) -> BaseMatch:
        """Cancel a match that has not finished. Scorers and the creator may cancel."""
        with self.locks.hold(match_id):
            match = self.repository.find_by_id(match_id)
            if match is None:
                raise MatchNotFoundError(f"Match {match_id} not found")
            if not (match.is_authorized(actor_id) or (actor_id is not None and match.created_by == str(actor_id))):
                raise NotAuthorizedError(f"User {actor_id} may not cancel match {match.id}")
            cancelled = self.repository.save(match.cancel(actor_id=str(actor_id), reason=reason))
            if self.broadcaster is not None:
                self.broadcaster.match_updated(cancelled.sport, 'cancel', cancelled)
        logger.info(f"🚫 {cancelled.sport} match {cancelled.id} cancelled by {actor_id}")
        return cancelled
