# live_scoring/models/tennis.py

"""
Tennis

Points roll up into games, games into sets. A game is won at four points with
a two point lead; at ``tiebreakAt`` games all the set is decided by a tiebreak
game played to seven, again by two. The match goes to whoever first takes a
majority of ``bestOfSets``.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional

from live_scoring.models.base import BaseMatch, ScoringEvent, optional_int
from live_scoring.models.rally import (
    RallyEntry, RallyGame, RallyVocabulary, game_winner, rally_event_type
)
from live_scoring.services.errors import InvalidEventPayloadError

TENNIS_VOCABULARY = RallyVocabulary(
    winning=('Ace', 'Winner', 'Volley', 'Smash', 'DropShot'),
    errors=('DoubleFault', 'UnforcedError', 'ForcedError', 'Net', 'Out')
)


@dataclass
class TennisGame(RallyGame):
    tiebreak: bool = False

    def to_dict(self, number_key: str = 'gameNumber') -> Dict[str, Any]:
        data = super().to_dict(number_key)
        data['tiebreak'] = self.tiebreak
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], number_key: str = 'gameNumber') -> 'TennisGame':
        game = super().from_dict(data, number_key)
        game.tiebreak = bool(data.get('tiebreak', False))
        return game


@dataclass
class TennisSet:
    number: int
    team1_games: int = 0
    team2_games: int = 0
    winner_team_id: Optional[str] = None
    games: List[TennisGame] = field(default_factory=list)

    def __post_init__(self):
        if not self.games:
            self.games = [TennisGame(number=1)]

    @property
    def current_game(self) -> TennisGame:
        return self.games[-1]

    def games_for(self, side: int) -> int:
        return self.team1_games if side == 0 else self.team2_games

    def add_game(self, side: int):
        if side == 0:
            self.team1_games += 1
        else:
            self.team2_games += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'setNumber': self.number,
            'team1Games': self.team1_games,
            'team2Games': self.team2_games,
            'winnerTeamId': self.winner_team_id,
            'currentGame': len(self.games),
            'games': [game.to_dict() for game in self.games]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TennisSet':
        return cls(
            number=int(data.get('setNumber', 1)),
            team1_games=int(data.get('team1Games', 0)),
            team2_games=int(data.get('team2Games', 0)),
            winner_team_id=data.get('winnerTeamId'),
            games=[TennisGame.from_dict(g) for g in data.get('games') or []]
        )


@dataclass
class TennisMatch(BaseMatch):

    SPORT: ClassVar[str] = 'tennis'
    VOCABULARY: ClassVar[RallyVocabulary] = TENNIS_VOCABULARY
    DEFAULT_RULES: ClassVar[Dict[str, Any]] = {
        'bestOfSets': 3,
        'gamesToWinSet': 6,
        'tiebreakAt': 6,
        'pointsToWinGame': 4,
        'tiebreakPoints': 7,
        'winBy': 2
    }

    sets: List[TennisSet] = field(default_factory=list)
    current_set: int = 1

    def __post_init__(self):
        super().__post_init__()
        if not self.sets:
            self.sets = [TennisSet(number=1)]

    @property
    def current_period_index(self) -> int:
        return self.current_set - 1

    @property
    def current(self) -> TennisSet:
        return self.sets[self.current_period_index]

    @property
    def sets_needed(self) -> int:
        return int(self.rules['bestOfSets']) // 2 + 1

    def sets_won(self, side: int) -> int:
        team_id = self.team_id_for(side)
        return sum(1 for tennis_set in self.sets if tennis_set.winner_team_id == team_id)

    def _apply_event(self, event: ScoringEvent):
        payload = event.payload
        event_type = self.VOCABULARY.canonical(rally_event_type(event))
        player_id = payload.get('playerId')

        if payload.get('pointTo') is not None:
            side = self.side_from_point_to(payload['pointTo'])
        else:
            player_side = self.side_of_player(player_id)
            if player_side is None:
                raise InvalidEventPayloadError("pointTo is required")
            side = 1 - player_side if self.VOCABULARY.is_error(event_type) else player_side

        set_number = optional_int(payload, 'set')
        if set_number is not None and set_number != self.current_set:
            raise InvalidEventPayloadError(
                f"Set {set_number} is not in progress (current set is {self.current_set})"
            )

        game = self.current.current_game
        game.rally_log.append(RallyEntry(
            event_type=event_type,
            point_to=side,
            player_id=str(player_id) if player_id is not None else None,
            description=payload.get('description')
        ))
        game.add_point(side)

    def reevaluate(self):
        tennis_set = self.current
        if tennis_set.winner_team_id is None:
            game = tennis_set.current_game
            if game.winner_team_id is None:
                target = self.rules['tiebreakPoints'] if game.tiebreak else self.rules['pointsToWinGame']
                side = game_winner(game.team1_points, game.team2_points, int(target), int(self.rules['winBy']))
                if side is None:
                    return
                game.winner_team_id = self.team_id_for(side)
                tennis_set.add_game(side)

            set_side = self._set_winner(tennis_set)
            if set_side is None:
                tiebreak_at = int(self.rules['tiebreakAt'])
                tennis_set.games.append(TennisGame(
                    number=len(tennis_set.games) + 1,
                    tiebreak=tennis_set.team1_games == tennis_set.team2_games == tiebreak_at
                ))
                return
            tennis_set.winner_team_id = self.team_id_for(set_side)

        for side in (0, 1):
            if self.sets_won(side) >= self.sets_needed:
                self.complete(side)
                return
        if self.current_set == len(self.sets):
            self.sets.append(TennisSet(number=self.current_set + 1))
        self.current_set += 1

    def _set_winner(self, tennis_set: TennisSet) -> Optional[int]:
        team1, team2 = tennis_set.team1_games, tennis_set.team2_games
        if team1 == team2:
            return None
        leader = 0 if team1 > team2 else 1
        high, low = max(team1, team2), min(team1, team2)
        tiebreak_at = int(self.rules['tiebreakAt'])
        if high >= int(self.rules['gamesToWinSet']) and high - low >= 2:
            return leader
        # 7-6 after a tiebreak
        if high == tiebreak_at + 1 and low == tiebreak_at:
            return leader
        return None

    def _variant_dict(self) -> Dict[str, Any]:
        return {
            'sets': [tennis_set.to_dict() for tennis_set in self.sets],
            'currentSet': self.current_set,
            'bestOfSets': int(self.rules['bestOfSets']),
            'tiebreakAt': int(self.rules['tiebreakAt'])
        }

    @classmethod
    def _variant_kwargs(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        kwargs = {
            'sets': [TennisSet.from_dict(s) for s in data.get('sets') or []],
            'current_set': int(data.get('currentSet') or 1)
        }
        overrides = {key: data[key] for key in ('bestOfSets', 'tiebreakAt') if data.get(key)}
        if overrides:
            kwargs['rules'] = {**(data.get('rules') or {}), **overrides}
        return kwargs
