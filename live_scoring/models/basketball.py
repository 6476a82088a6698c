# live_scoring/models/basketball.py

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional

from live_scoring.models.base import BaseMatch, ScoringEvent, optional_int, optional_str, require, to_iso, parse_datetime, utcnow
from live_scoring.services.errors import InvalidEventPayloadError

FIXED_POINTS = {
    '1_pointer': 1,
    'free_throw': 1,
    '2_pointer': 2,
    '3_pointer': 3
}
SCORING_TYPES = frozenset(FIXED_POINTS) | {'score'}


@dataclass
class ScoreEvent:
    team_id: str
    points: int
    quarter: int
    player_id: Optional[str] = None
    type: str = 'score'
    description: Optional[str] = None
    time: Any = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'teamId': self.team_id,
            'playerId': self.player_id,
            'points': self.points,
            'quarter': self.quarter,
            'type': self.type,
            'description': self.description,
            'time': to_iso(self.time)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScoreEvent':
        return cls(
            team_id=data['teamId'],
            points=int(data['points']),
            quarter=int(data['quarter']),
            player_id=data.get('playerId'),
            type=data.get('type', 'score'),
            description=data.get('description'),
            time=parse_datetime(data.get('time')) or utcnow()
        )


@dataclass
class TeamCall:
    """A foul or timeout charged to one team in one period."""
    team_id: str
    quarter: int
    player_id: Optional[str] = None
    kind: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'teamId': self.team_id, 'playerId': self.player_id, 'quarter': self.quarter, 'kind': self.kind}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TeamCall':
        return cls(
            team_id=data['teamId'],
            quarter=int(data['quarter']),
            player_id=data.get('playerId'),
            kind=data.get('kind')
        )


@dataclass
class BasketballMatch(BaseMatch):
    """
    Four quarters, then as many overtime periods as it takes to break a tie.

    ``score_by_quarter`` holds one ``{team1, team2}`` entry per period played,
    overtime included, and always agrees with ``score_events``.
    """

    SPORT: ClassVar[str] = 'basketball'
    DEFAULT_RULES: ClassVar[Dict[str, Any]] = {
        'quarters': 4,
        'quarterDurationMins': 10,
        'overtimeDurationMins': 5,
        'timeoutsPerTeam': None
    }

    total_score: Dict[str, int] = field(default_factory=lambda: {'team1': 0, 'team2': 0})
    score_by_quarter: List[Dict[str, int]] = field(default_factory=list)
    score_events: List[ScoreEvent] = field(default_factory=list)
    fouls: List[TeamCall] = field(default_factory=list)
    timeouts: List[TeamCall] = field(default_factory=list)
    current_quarter: int = 1
    periods_completed: int = 0

    def __post_init__(self):
        super().__post_init__()
        while len(self.score_by_quarter) < self.current_quarter:
            self.score_by_quarter.append({'team1': 0, 'team2': 0})

    @property
    def quarters(self) -> int:
        return int(self.rules['quarters'])

    @property
    def current_period_index(self) -> int:
        return self.current_quarter - 1

    @property
    def in_overtime(self) -> bool:
        return self.current_quarter > self.quarters

    def _apply_event(self, event: ScoringEvent):
        payload = event.payload
        if event.type == 'end_quarter':
            self._end_quarter(payload)
            return

        require(payload, 'teamId')
        side = self.side_of(payload['teamId'])
        quarter = optional_int(payload, 'quarter')
        if quarter is not None and quarter != self.current_quarter:
            raise InvalidEventPayloadError(
                f"Quarter {quarter} is not in progress (current quarter is {self.current_quarter})"
            )

        if event.type in SCORING_TYPES:
            self._score(side, event.type, payload)
        elif event.type == 'foul':
            self.fouls.append(self._call(side, payload))
        elif event.type == 'timeout':
            self._timeout(side, payload)
        else:
            raise InvalidEventPayloadError(f"Unsupported basketball event type: {event.type}")

    def _score(self, side: int, event_type: str, payload):
        points = FIXED_POINTS.get(event_type)
        if points is None:
            points = optional_int(payload, 'points')
            if points not in (1, 2, 3):
                raise InvalidEventPayloadError("points must be 1, 2 or 3")
        key = self.side_key(side)
        self.total_score[key] += points
        self.score_by_quarter[self.current_period_index][key] += points
        self.score_events.append(ScoreEvent(
            team_id=self.team_id_for(side),
            points=points,
            quarter=self.current_quarter,
            player_id=optional_str(payload, 'playerId'),
            type=event_type,
            description=payload.get('description')
        ))

    def _call(self, side: int, payload) -> TeamCall:
        return TeamCall(
            team_id=self.team_id_for(side),
            quarter=self.current_quarter,
            player_id=optional_str(payload, 'playerId'),
            kind=payload.get('kind')
        )

    def _timeout(self, side: int, payload):
        limit = self.rules.get('timeoutsPerTeam')
        team_id = self.team_id_for(side)
        if limit is not None and sum(1 for t in self.timeouts if t.team_id == team_id) >= int(limit):
            raise InvalidEventPayloadError(f"{self.teams[side].name} have no timeouts left")
        self.timeouts.append(self._call(side, payload))
        self.add_feed('timeout', team_id=team_id, description=f"Timeout {self.teams[side].name}")

    def _end_quarter(self, payload):
        quarter = optional_int(payload, 'quarter')
        if quarter is not None and quarter != self.current_quarter:
            raise InvalidEventPayloadError(
                f"Quarter {quarter} is not in progress (current quarter is {self.current_quarter})"
            )
        self.periods_completed = self.current_quarter
        label = f"overtime {self.current_quarter - self.quarters}" if self.in_overtime else f"quarter {self.current_quarter}"
        self.add_feed('end_quarter', description=f"End of {label}")

    def reevaluate(self):
        if self.periods_completed < self.current_quarter:
            return
        team1, team2 = self.total_score['team1'], self.total_score['team2']
        if self.periods_completed >= self.quarters and team1 != team2:
            self.complete(0 if team1 > team2 else 1)
            return
        self.current_quarter += 1
        self.score_by_quarter.append({'team1': 0, 'team2': 0})

    def _variant_dict(self) -> Dict[str, Any]:
        return {
            'totalScore': dict(self.total_score),
            'scoreByQuarter': [dict(entry) for entry in self.score_by_quarter],
            'scoreEvents': [e.to_dict() for e in self.score_events],
            'fouls': [f.to_dict() for f in self.fouls],
            'timeouts': [t.to_dict() for t in self.timeouts],
            'quarters': self.quarters,
            'quarterDurationMins': int(self.rules['quarterDurationMins']),
            'currentQuarter': self.current_quarter,
            'periodsCompleted': self.periods_completed
        }

    @classmethod
    def _variant_kwargs(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        kwargs = {
            'total_score': {'team1': 0, 'team2': 0, **(data.get('totalScore') or {})},
            'score_by_quarter': [
                {'team1': int(q.get('team1', 0)), 'team2': int(q.get('team2', 0))}
                for q in data.get('scoreByQuarter') or []
            ],
            'score_events': [ScoreEvent.from_dict(e) for e in data.get('scoreEvents') or []],
            'fouls': [TeamCall.from_dict(f) for f in data.get('fouls') or []],
            'timeouts': [TeamCall.from_dict(t) for t in data.get('timeouts') or []],
            'current_quarter': int(data.get('currentQuarter') or 1),
            'periods_completed': int(data.get('periodsCompleted') or 0)
        }
        overrides = {key: int(data[key]) for key in ('quarters', 'quarterDurationMins') if data.get(key)}
        if overrides:
            kwargs['rules'] = {**(data.get('rules') or {}), **overrides}
        return kwargs
