# live_scoring/models/football.py

"""
Football

Goals, cards, substitutions and the penalty shootout. Every goal, card and
substitution is mirrored into the match feed.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional

from live_scoring.models.base import BaseMatch, ScoringEvent, new_id, optional_int, optional_str, require
from live_scoring.services.errors import InvalidEventPayloadError


def minute_label(minute: Optional[int]) -> Optional[str]:
    return f"{minute}'" if minute is not None else None


@dataclass
class Goal:
    team_id: str
    player_id: Optional[str] = None
    minute: Optional[int] = None
    assist_id: Optional[str] = None
    kind: str = 'goal'
    disallowed: bool = False
    id: str = field(default_factory=new_id)

    @property
    def counts(self) -> bool:
        return not self.disallowed

    @property
    def credits_scorer(self) -> bool:
        """Own goals and disallowed goals never count towards a scorer's tally."""
        return self.counts and self.kind != 'own_goal' and self.player_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            '_id': self.id,
            'teamId': self.team_id,
            'scorerId': self.player_id,
            'assistId': self.assist_id,
            'minute': self.minute,
            'kind': self.kind,
            'disallowed': self.disallowed
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Goal':
        return cls(
            id=data.get('_id') or new_id(),
            team_id=data['teamId'],
            player_id=data.get('scorerId', data.get('playerId')),
            assist_id=data.get('assistId'),
            minute=data.get('minute'),
            kind=data.get('kind', 'goal'),
            disallowed=bool(data.get('disallowed', False))
        )


@dataclass
class Card:
    team_id: str
    player_id: str
    minute: Optional[int] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'teamId': self.team_id, 'playerId': self.player_id, 'minute': self.minute, 'reason': self.reason}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Card':
        return cls(
            team_id=data['teamId'],
            player_id=data['playerId'],
            minute=data.get('minute'),
            reason=data.get('reason')
        )


@dataclass
class Substitution:
    team_id: str
    player_out_id: str
    player_in_id: str
    minute: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'teamId': self.team_id,
            'playerOutId': self.player_out_id,
            'playerInId': self.player_in_id,
            'minute': self.minute
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Substitution':
        return cls(
            team_id=data['teamId'],
            player_out_id=data['playerOutId'],
            player_in_id=data['playerInId'],
            minute=data.get('minute')
        )


@dataclass
class ShootoutKick:
    team_id: str
    scored: bool
    player_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'teamId': self.team_id, 'playerId': self.player_id, 'scored': self.scored}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ShootoutKick':
        return cls(team_id=data['teamId'], scored=bool(data.get('scored')), player_id=data.get('playerId'))


@dataclass
class FootballMatch(BaseMatch):

    SPORT: ClassVar[str] = 'football'
    DEFAULT_RULES: ClassVar[Dict[str, Any]] = {
        'halves': 2,
        'halfDurationMinutes': 45,
        'allowExtraTime': True
    }

    score: Dict[str, int] = field(default_factory=lambda: {'team1': 0, 'team2': 0})
    goals: List[Goal] = field(default_factory=list)
    yellow_cards: List[Card] = field(default_factory=list)
    red_cards: List[Card] = field(default_factory=list)
    substitutions: List[Substitution] = field(default_factory=list)
    penalties: List[ShootoutKick] = field(default_factory=list)
    current_half: int = 1
    periods_completed: int = 0
    full_time: bool = False

    @property
    def current_period_index(self) -> int:
        return self.current_half - 1

    @property
    def half_duration_minutes(self) -> int:
        return int(self.rules['halfDurationMinutes'])

    def goals_for(self, side: int) -> int:
        return self.score[self.side_key(side)]

    def shootout_goals(self, side: int) -> int:
        team_id = self.team_id_for(side)
        return sum(1 for kick in self.penalties if kick.team_id == team_id and kick.scored)

    def _apply_event(self, event: ScoringEvent):
        handler = getattr(self, f'_on_{event.type}', None)
        if handler is None:
            raise InvalidEventPayloadError(f"Unsupported football event type: {event.type}")
        if self.full_time:
            raise InvalidEventPayloadError("Full time has already been called")
        handler(event.payload)

    def _on_goal(self, payload, kind='goal'):
        require(payload, 'teamId')
        side = self.side_of(payload['teamId'])
        minute = optional_int(payload, 'minute')
        goal = Goal(
            team_id=self.team_id_for(side),
            player_id=optional_str(payload, 'playerId'),
            minute=minute,
            assist_id=optional_str(payload, 'assistId'),
            kind=kind
        )
        self.goals.append(goal)
        self.score[self.side_key(side)] += 1
        label = {'goal': 'Goal', 'penalty': 'Penalty scored', 'own_goal': 'Own goal'}[kind]
        self.add_feed(
            kind,
            time=minute_label(minute),
            team_id=goal.team_id,
            player_id=goal.player_id,
            description=f"{label} for {self.teams[side].name}",
            meta={'goalId': goal.id, 'assistId': goal.assist_id}
        )

    def _on_penalty(self, payload):
        self._on_goal(payload, kind='penalty')

    def _on_own_goal(self, payload):
        # teamId is the side credited with the goal
        self._on_goal(payload, kind='own_goal')

    def _on_disallowed(self, payload):
        require(payload, 'teamId')
        side = self.side_of(payload['teamId'])
        team_id = self.team_id_for(side)
        goal_id = payload.get('goalId')
        candidates = [
            goal for goal in self.goals
            if goal.team_id == team_id and goal.counts and (goal_id is None or goal.id == goal_id)
        ]
        if not candidates:
            raise InvalidEventPayloadError(f"No standing goal to disallow for team {team_id}")
        goal = candidates[-1]
        goal.disallowed = True
        self.score[self.side_key(side)] -= 1
        self.add_feed(
            'disallowed',
            time=minute_label(optional_int(payload, 'minute')),
            team_id=team_id,
            player_id=goal.player_id,
            description=f"Goal for {self.teams[side].name} disallowed",
            meta={'goalId': goal.id, 'reason': payload.get('reason')}
        )

    def _on_yellow_card(self, payload):
        require(payload, 'teamId', 'playerId')
        side = self.side_of(payload['teamId'])
        card = self._card(side, payload)
        second_yellow = any(c.player_id == card.player_id for c in self.yellow_cards)
        self.yellow_cards.append(card)
        self.add_feed(
            'yellow_card',
            time=minute_label(card.minute),
            team_id=card.team_id,
            player_id=card.player_id,
            description=f"Yellow card for {self.teams[side].name}"
        )
        if second_yellow:
            self._send_off(side, card, reason='second yellow')

    def _on_red_card(self, payload):
        require(payload, 'teamId', 'playerId')
        side = self.side_of(payload['teamId'])
        self._send_off(side, self._card(side, payload), reason=payload.get('reason'))

    def _card(self, side: int, payload) -> Card:
        return Card(
            team_id=self.team_id_for(side),
            player_id=str(payload['playerId']),
            minute=optional_int(payload, 'minute'),
            reason=payload.get('reason')
        )

    def _send_off(self, side: int, card: Card, reason: Optional[str]):
        red = Card(team_id=card.team_id, player_id=card.player_id, minute=card.minute, reason=reason)
        self.red_cards.append(red)
        self.add_feed(
            'red_card',
            time=minute_label(red.minute),
            team_id=red.team_id,
            player_id=red.player_id,
            description=f"Red card for {self.teams[side].name}",
            meta={'reason': reason}
        )

    def _on_substitution(self, payload):
        require(payload, 'teamId', 'playerOutId', 'playerInId')
        side = self.side_of(payload['teamId'])
        substitution = Substitution(
            team_id=self.team_id_for(side),
            player_out_id=str(payload['playerOutId']),
            player_in_id=str(payload['playerInId']),
            minute=optional_int(payload, 'minute')
        )
        self.substitutions.append(substitution)
        self.add_feed(
            'substitution',
            time=minute_label(substitution.minute),
            team_id=substitution.team_id,
            player_id=substitution.player_in_id,
            description=f"Substitution for {self.teams[side].name}",
            meta={'playerOutId': substitution.player_out_id}
        )

    def _on_shootout_kick(self, payload):
        require(payload, 'teamId')
        if self.periods_completed < int(self.rules['halves']):
            raise InvalidEventPayloadError("A shootout can only follow the end of regulation time")
        if self.goals_for(0) != self.goals_for(1):
            raise InvalidEventPayloadError("A shootout needs the score to be level")
        side = self.side_of(payload['teamId'])
        self.penalties.append(ShootoutKick(
            team_id=self.team_id_for(side),
            scored=bool(payload.get('scored')),
            player_id=optional_str(payload, 'playerId')
        ))

    def _on_end_half(self, payload):
        max_halves = int(self.rules['halves']) + (2 if self.rules.get('allowExtraTime') else 0)
        if self.periods_completed >= max_halves:
            raise InvalidEventPayloadError("No further half to end")
        self.periods_completed += 1
        self.add_feed('end_half', description=f"End of half {self.current_half}")
        if self.periods_completed < max_halves:
            self.current_half = self.periods_completed + 1

    def _on_full_time(self, payload):
        self.full_time = True
        self.add_feed('full_time', description="Full time")

    def reevaluate(self):
        if not self.full_time:
            return
        if self.goals_for(0) != self.goals_for(1):
            self.complete(0 if self.goals_for(0) > self.goals_for(1) else 1)
        elif self.shootout_goals(0) != self.shootout_goals(1):
            self.complete(0 if self.shootout_goals(0) > self.shootout_goals(1) else 1)
        else:
            self.complete(None)

    def _variant_dict(self) -> Dict[str, Any]:
        return {
            'score': dict(self.score),
            'goals': [goal.to_dict() for goal in self.goals],
            'yellowCards': [card.to_dict() for card in self.yellow_cards],
            'redCards': [card.to_dict() for card in self.red_cards],
            'substitutions': [sub.to_dict() for sub in self.substitutions],
            'penalties': [kick.to_dict() for kick in self.penalties],
            'currentHalf': self.current_half,
            'halfDurationMinutes': self.half_duration_minutes,
            'periodsCompleted': self.periods_completed,
            'fullTime': self.full_time
        }

    @classmethod
    def _variant_kwargs(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        kwargs = {
            'score': {'team1': 0, 'team2': 0, **(data.get('score') or {})},
            'goals': [Goal.from_dict(g) for g in data.get('goals') or []],
            'yellow_cards': [Card.from_dict(c) for c in data.get('yellowCards') or []],
            'red_cards': [Card.from_dict(c) for c in data.get('redCards') or []],
            'substitutions': [Substitution.from_dict(s) for s in data.get('substitutions') or []],
            'penalties': [ShootoutKick.from_dict(p) for p in data.get('penalties') or []],
            'current_half': int(data.get('currentHalf') or 1),
            'periods_completed': int(data.get('periodsCompleted') or 0),
            'full_time': bool(data.get('fullTime', False))
        }
        if data.get('halfDurationMinutes'):
            kwargs['rules'] = {**(data.get('rules') or {}), 'halfDurationMinutes': int(data['halfDurationMinutes'])}
        return kwargs
