# live_scoring/services/leaderboard.py

"""
Leaderboard Aggregator

Read-only player rankings over completed matches of one sport:

- football: goals per scorer (own goals and disallowed goals do not count)
- basketball: points per scorer from the score events
- racket and net sports: rally points won by a player's winning shots

Rows are ordered by the metric descending, then by player id ascending so
equal totals always come back in the same order.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set

from live_scoring.models import BaseMatch, RallyEntry, TennisMatch
from live_scoring.services.sport_resolver import resolve_sport

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20


@dataclass
class PlayerTally:
    player_id: str
    team_id: Optional[str] = None
    player_name: Optional[str] = None
    total: int = 0
    match_ids: Set[str] = field(default_factory=set)

    def to_row(self, metric: str) -> Dict:
        return {
            'playerId': self.player_id,
            'playerName': self.player_name,
            'teamId': self.team_id,
            'matchesPlayed': len(self.match_ids),
            metric: self.total
        }


class LeaderboardService:

    def __init__(self, repository, limit: int = DEFAULT_LIMIT):
        self.repository = repository
        self.limit = limit

    def leaderboard(self, sport: str, limit: Optional[int] = None) -> List[Dict]:
        handle = resolve_sport(sport)
        limit = max(1, self.limit if limit is None else limit)
        matches = self.repository.find_completed(handle.sport)

        tallies: Dict[str, PlayerTally] = {}
        if handle.sport == 'football':
            metric = 'goals'
            for match in matches:
                for goal in match.goals:
                    if goal.credits_scorer:
                        self._credit(tallies, match, goal.player_id, goal.team_id, 1)
        elif handle.sport == 'basketball':
            metric = 'points'
            for match in matches:
                for score_event in match.score_events:
                    if score_event.player_id:
                        self._credit(tallies, match, score_event.player_id, score_event.team_id, score_event.points)
        else:
            metric = 'points'
            vocabulary = handle.rally_vocabulary
            for match in matches:
                for entry in rally_entries(match):
                    if entry.player_id and vocabulary.is_winning_shot(entry.event_type):
                        self._credit(tallies, match, entry.player_id, match.team_id_for(entry.point_to), 1)

        ranked = sorted(tallies.values(), key=lambda t: (-t.total, t.player_id))
        logger.debug(f"Leaderboard for {handle.sport}: {len(ranked)} player(s) over {len(matches)} match(es)")
        return [tally.to_row(metric) for tally in ranked[:limit]]

    @staticmethod
    def _credit(tallies: Dict[str, PlayerTally], match: BaseMatch, player_id, team_id, amount: int):
        player_id = str(player_id)
        tally = tallies.get(player_id)
        if tally is None:
            tally = tallies[player_id] = PlayerTally(player_id=player_id)
        tally.total += amount
        tally.team_id = team_id
        tally.match_ids.add(match.id)
        if tally.player_name is None:
            tally.player_name = player_name(match, player_id)


def rally_entries(match: BaseMatch) -> Iterator[RallyEntry]:
    if isinstance(match, TennisMatch):
        for tennis_set in match.sets:
            for game in tennis_set.games:
                yield from game.rally_log
    else:
        for game in match.games:
            yield from game.rally_log


def player_name(match: BaseMatch, player_id: str) -> Optional[str]:
    for team in match.teams:
        for player in team.players:
            if player.id == player_id:
                return player.name
    return None
