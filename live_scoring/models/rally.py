# live_scoring/models/rally.py

"""
Rally Scoring

Shared pieces for the racket and net sports: the per-sport rally vocabulary,
the rally log entry, the game (or set) container and ``RallyPointMatch``, the
variant base for badminton, pickleball and volleyball where every rally
scores a point.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Tuple

from live_scoring.models.base import BaseMatch, ScoringEvent, optional_int, to_iso, parse_datetime, utcnow
from live_scoring.services.errors import InvalidEventPayloadError

# Event types that carry the rally kind in payload.eventType instead of type.
GENERIC_RALLY_TYPES = frozenset({'rally', 'point', 'update_score'})


class RallyVocabulary:
    """
    Closed set of rally event types for one sport.

    Winning shots credit the named player; errors give the point to the
    opponent of the named player and credit nobody.
    """

    def __init__(self, winning: Iterable[str], errors: Iterable[str]):
        self.winning = tuple(winning)
        self.errors = tuple(errors)
        self._lookup = {name.lower(): name for name in self.winning + self.errors}

    @property
    def all(self) -> Tuple[str, ...]:
        return self.winning + self.errors

    def canonical(self, event_type: Optional[str]) -> str:
        if not event_type:
            raise InvalidEventPayloadError("Rally eventType is required")
        name = self._lookup.get(str(event_type).strip().lower())
        if name is None:
            raise InvalidEventPayloadError(f"Unsupported rally event type: {event_type}")
        return name

    def is_error(self, event_type: str) -> bool:
        return event_type in self.errors

    def is_winning_shot(self, event_type: str) -> bool:
        return event_type in self.winning

    def __contains__(self, event_type) -> bool:
        return event_type is not None and str(event_type).strip().lower() in self._lookup


@dataclass
class RallyEntry:
    event_type: str
    point_to: int
    player_id: Optional[str] = None
    server_team_id: Optional[str] = None
    description: Optional[str] = None
    time: Any = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'playerId': self.player_id,
            'eventType': self.event_type,
            'pointTo': self.point_to + 1,
            'serverTeamId': self.server_team_id,
            'description': self.description,
            'time': to_iso(self.time)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RallyEntry':
        return cls(
            event_type=data['eventType'],
            point_to=int(data['pointTo']) - 1,
            player_id=data.get('playerId'),
            server_team_id=data.get('serverTeamId'),
            description=data.get('description'),
            time=parse_datetime(data.get('time')) or utcnow()
        )


@dataclass
class RallyGame:
    """A game (badminton, pickleball, tennis) or set (volleyball) of rally points."""
    number: int
    team1_points: int = 0
    team2_points: int = 0
    winner_team_id: Optional[str] = None
    rally_log: List[RallyEntry] = field(default_factory=list)

    def points(self, side: int) -> int:
        return self.team1_points if side == 0 else self.team2_points

    def add_point(self, side: int):
        if side == 0:
            self.team1_points += 1
        else:
            self.team2_points += 1

    def log_totals(self) -> Tuple[int, int]:
        """Point totals recomputed from the rally log alone."""
        team1 = sum(1 for entry in self.rally_log if entry.point_to == 0)
        return team1, len(self.rally_log) - team1

    def to_dict(self, number_key: str = 'gameNumber') -> Dict[str, Any]:
        return {
            number_key: self.number,
            'team1Points': self.team1_points,
            'team2Points': self.team2_points,
            'winnerTeamId': self.winner_team_id,
            'rallyLog': [entry.to_dict() for entry in self.rally_log]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], number_key: str = 'gameNumber') -> 'RallyGame':
        return cls(
            number=int(data.get(number_key, 1)),
            team1_points=int(data.get('team1Points', 0)),
            team2_points=int(data.get('team2Points', 0)),
            winner_team_id=data.get('winnerTeamId'),
            rally_log=[RallyEntry.from_dict(e) for e in data.get('rallyLog') or []]
        )


def rally_event_type(event: ScoringEvent) -> str:
    if event.type.lower() in GENERIC_RALLY_TYPES:
        return event.payload.get('eventType')
    return event.type


def game_winner(team1: int, team2: int, target: int, win_by: int, cap: Optional[int] = None) -> Optional[int]:
    """Return the winning side of a point-count game, or None while it is open."""
    if team1 == team2:
        return None
    leader = 0 if team1 > team2 else 1
    high, low = max(team1, team2), min(team1, team2)
    if cap and high >= cap:
        return leader
    if high >= target and high - low >= win_by:
        return leader
    return None


@dataclass
class RallyPointMatch(BaseMatch):
    """
    Variant base for rally-point sports.

    Subclasses set ``VOCABULARY``, ``DEFAULT_RULES`` and the wire key names.
    """

    VOCABULARY: ClassVar[RallyVocabulary] = RallyVocabulary((), ())
    GAMES_KEY: ClassVar[str] = 'games'
    CURRENT_KEY: ClassVar[str] = 'currentGame'
    NUMBER_KEY: ClassVar[str] = 'gameNumber'
    BEST_OF_KEY: ClassVar[str] = 'bestOf'

    games: List[RallyGame] = field(default_factory=list)
    current_game: int = 1
    serving_team_id: Optional[str] = None

    def __post_init__(self):
        super().__post_init__()
        if not self.games:
            self.games = [RallyGame(number=1)]
        if not 1 <= self.current_game <= len(self.games):
            raise ValueError(f"currentGame {self.current_game} out of range")

    @property
    def best_of(self) -> int:
        return int(self.rules['bestOf'])

    @property
    def games_needed(self) -> int:
        return self.best_of // 2 + 1

    @property
    def current_period_index(self) -> int:
        return self.current_game - 1

    @property
    def current(self) -> RallyGame:
        return self.games[self.current_period_index]

    def games_won(self, side: int) -> int:
        team_id = self.team_id_for(side)
        return sum(1 for game in self.games if game.winner_team_id == team_id)

    def target_for(self, game_number: int) -> int:
        if game_number == self.best_of:
            return int(self.rules.get('decidingGamePoints') or self.rules['pointsToWin'])
        return int(self.rules['pointsToWin'])

    def _apply_event(self, event: ScoringEvent):
        payload = event.payload
        event_type = self.VOCABULARY.canonical(rally_event_type(event))
        player_id = payload.get('playerId')
        side = self._resolve_point_side(event_type, payload.get('pointTo'), player_id)

        game_number = optional_int(payload, 'game')
        if game_number is not None and game_number != self.current_game:
            raise InvalidEventPayloadError(
                f"Game {game_number} is not in progress (current game is {self.current_game})"
            )

        game = self.current
        game.rally_log.append(RallyEntry(
            event_type=event_type,
            point_to=side,
            player_id=str(player_id) if player_id is not None else None,
            server_team_id=self.serving_team_id,
            description=payload.get('description')
        ))
        game.add_point(side)
        self.serving_team_id = self.team_id_for(side)

    def _resolve_point_side(self, event_type: str, point_to, player_id) -> int:
        if point_to is not None:
            return self.side_from_point_to(point_to)
        player_side = self.side_of_player(player_id)
        if player_side is None:
            raise InvalidEventPayloadError("pointTo is required")
        return 1 - player_side if self.VOCABULARY.is_error(event_type) else player_side

    def reevaluate(self):
        game = self.current
        if game.winner_team_id is None:
            side = game_winner(
                game.team1_points, game.team2_points,
                self.target_for(game.number),
                int(self.rules['winBy']),
                self.rules.get('cap')
            )
            if side is None:
                return
            game.winner_team_id = self.team_id_for(side)

        for side in (0, 1):
            if self.games_won(side) >= self.games_needed:
                self.complete(side)
                return
        if self.current_game == len(self.games):
            self.games.append(RallyGame(number=self.current_game + 1))
        self.current_game += 1

    def _variant_dict(self) -> Dict[str, Any]:
        return {
            self.GAMES_KEY: [game.to_dict(self.NUMBER_KEY) for game in self.games],
            self.CURRENT_KEY: self.current_game,
            self.BEST_OF_KEY: self.best_of,
            'servingTeamId': self.serving_team_id
        }

    @classmethod
    def _variant_kwargs(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        kwargs = {
            'games': [RallyGame.from_dict(g, cls.NUMBER_KEY) for g in data.get(cls.GAMES_KEY) or []],
            'current_game': int(data.get(cls.CURRENT_KEY) or 1),
            'serving_team_id': data.get('servingTeamId')
        }
        if data.get(cls.BEST_OF_KEY):
            kwargs['rules'] = {**(data.get('rules') or {}), 'bestOf': int(data[cls.BEST_OF_KEY])}
        return kwargs
