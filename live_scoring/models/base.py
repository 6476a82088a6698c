# live_scoring/models/base.py

"""
Match Envelope

Dataclasses shared by every sport: team and player references, the feed log,
the inbound scoring event, and ``BaseMatch`` which each sport variant extends.

Match documents travel over the wire and into storage in the camelCase shape
clients already use (``scoringUpdatedBy``, ``startAt`` ...). ``to_dict`` and
``from_dict`` are the only places that know about that shape.
"""

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

from live_scoring.services.errors import (
    InvalidEventPayloadError, MatchClosedError, MatchNotLiveError, UnknownTeamError
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def parse_datetime(value) -> Optional[datetime]:
    """Accept datetimes, ISO strings (with or without a trailing Z) or None."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    return datetime.fromisoformat(text)


def new_id() -> str:
    return uuid.uuid4().hex


class MatchStatus(str, Enum):
    """Match lifecycle states."""
    SCHEDULED = "scheduled"
    LIVE = "live"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (MatchStatus.COMPLETED, MatchStatus.CANCELLED)


# Lifecycle events are accepted for every sport.
LIFECYCLE_EVENTS = frozenset({'start', 'pause', 'resume'})


@dataclass
class PlayerRef:
    id: Optional[str]
    name: str
    number: Optional[Any] = None
    position: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'_id': self.id, 'name': self.name, 'number': self.number, 'position': self.position}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlayerRef':
        raw_id = data.get('_id', data.get('id'))
        return cls(
            id=str(raw_id) if raw_id is not None else None,
            name=data.get('name', ''),
            number=data.get('number'),
            position=data.get('position')
        )


@dataclass
class TeamRef:
    id: str
    name: str
    short_name: Optional[str] = None
    logo_url: Optional[str] = None
    coach: Optional[str] = None
    players: List[PlayerRef] = field(default_factory=list)

    def has_player(self, player_id) -> bool:
        return player_id is not None and any(p.id == str(player_id) for p in self.players)

    def to_dict(self) -> Dict[str, Any]:
        return {
            '_id': self.id,
            'name': self.name,
            'shortName': self.short_name,
            'logoUrl': self.logo_url,
            'coach': self.coach,
            'players': [p.to_dict() for p in self.players]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TeamRef':
        raw_id = data.get('_id', data.get('id'))
        if raw_id is None:
            raise ValueError(f"Team '{data.get('name')}' has no id")
        return cls(
            id=str(raw_id),
            name=data.get('name', ''),
            short_name=data.get('shortName'),
            logo_url=data.get('logoUrl'),
            coach=data.get('coach'),
            players=[PlayerRef.from_dict(p) for p in data.get('players') or []]
        )


@dataclass
class FeedEntry:
    """One coarse-grained narrative entry (goal, card, substitution ...)."""
    type: str
    time: Optional[str] = None
    description: Optional[str] = None
    team_id: Optional[str] = None
    player_id: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'time': self.time,
            'description': self.description,
            'teamId': self.team_id,
            'playerId': self.player_id,
            'meta': self.meta,
            'createdAt': to_iso(self.created_at)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FeedEntry':
        return cls(
            type=data['type'],
            time=data.get('time'),
            description=data.get('description'),
            team_id=data.get('teamId'),
            player_id=data.get('playerId'),
            meta=data.get('meta') or {},
            created_at=parse_datetime(data.get('createdAt')) or utcnow()
        )


@dataclass
class ScoringEvent:
    """
    An inbound event as the dispatcher sees it.

    ``from_wire`` accepts the client shape ``{matchId, sport, type, payload}``.
    """
    type: str
    payload: Dict[str, Any] = field(default_factory=dict)
    actor_id: Optional[str] = None
    match_id: Optional[str] = None
    sport: Optional[str] = None
    received_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_wire(cls, data: Dict[str, Any], actor_id=None) -> 'ScoringEvent':
        if not isinstance(data, dict):
            raise InvalidEventPayloadError("Event must be an object")
        event_type = data.get('type')
        if not event_type or not isinstance(event_type, str):
            raise InvalidEventPayloadError("Event type is required")
        payload = data.get('payload') or {}
        if not isinstance(payload, dict):
            raise InvalidEventPayloadError("Event payload must be an object")
        match_id = data.get('matchId')
        if not match_id:
            raise InvalidEventPayloadError("Match ID is required")
        return cls(
            type=event_type,
            payload=payload,
            actor_id=str(actor_id) if actor_id is not None else None,
            match_id=str(match_id),
            sport=data.get('sport')
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'matchId': self.match_id,
            'sport': self.sport,
            'type': self.type,
            'payload': self.payload,
            'actorId': self.actor_id,
            'receivedAt': to_iso(self.received_at)
        }


@dataclass
class BaseMatch:
    """
    Envelope shared by every sport.

    Sport variants override ``_apply_event``, ``reevaluate`` and
    ``current_period_index`` and add their own state fields. ``apply`` is the
    only entry point the dispatcher uses: it never touches ``self`` and returns
    an updated working copy instead.
    """

    SPORT: ClassVar[str] = ''
    DEFAULT_RULES: ClassVar[Dict[str, Any]] = {}

    id: str
    teams: List[TeamRef]
    sport: str = ''
    status: MatchStatus = MatchStatus.SCHEDULED
    title: Optional[str] = None
    format: Optional[str] = None
    location: Optional[str] = None
    start_at: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    scoring_updated_by: List[str] = field(default_factory=list)
    created_by: Optional[str] = None
    winner: Optional[str] = None
    feed: List[FeedEntry] = field(default_factory=list)
    rules: Dict[str, Any] = field(default_factory=dict)
    version: int = 0
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        if len(self.teams) != 2:
            raise ValueError(f"A match needs exactly two teams, got {len(self.teams)}")
        if not self.sport:
            self.sport = self.SPORT
        elif self.sport.lower() != self.SPORT:
            raise ValueError(f"{type(self).__name__} cannot hold a '{self.sport}' match")
        self.sport = self.SPORT
        self.status = MatchStatus(self.status)
        self.scoring_updated_by = [str(uid) for uid in self.scoring_updated_by]
        self.rules = {**self.DEFAULT_RULES, **(self.rules or {})}

    # ------------------------------------------------------------------
    # Team helpers
    # ------------------------------------------------------------------

    def side_of(self, team_id) -> int:
        """Return 0 or 1 for the team with ``team_id``."""
        if team_id is None:
            raise InvalidEventPayloadError("teamId is required")
        for index, team in enumerate(self.teams):
            if team.id == str(team_id):
                return index
        raise UnknownTeamError(f"Team {team_id} is not playing in match {self.id}")

    def team_id_for(self, side: int) -> str:
        return self.teams[side].id

    @staticmethod
    def side_key(side: int) -> str:
        return 'team1' if side == 0 else 'team2'

    def side_from_point_to(self, point_to) -> int:
        """``pointTo`` is 1/2 (wire convention) or a team id."""
        if isinstance(point_to, bool):
            raise InvalidEventPayloadError("pointTo must be 1, 2 or a team id")
        if point_to in (1, 2, '1', '2'):
            return int(point_to) - 1
        if point_to is None:
            raise InvalidEventPayloadError("pointTo is required")
        return self.side_of(point_to)

    def side_of_player(self, player_id) -> Optional[int]:
        for index, team in enumerate(self.teams):
            if team.has_player(player_id):
                return index
        return None

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    def is_authorized(self, actor_id) -> bool:
        return actor_id is not None and str(actor_id) in self.scoring_updated_by

    @property
    def is_complete(self) -> bool:
        return self.status == MatchStatus.COMPLETED

    @property
    def current_period_index(self) -> int:
        raise NotImplementedError

    def add_feed(self, entry_type: str, **kwargs) -> FeedEntry:
        entry = FeedEntry(type=entry_type, **kwargs)
        self.feed.append(entry)
        return entry

    def complete(self, winner_side: Optional[int]):
        """Close the match. A completed match keeps its first winner."""
        if self.status == MatchStatus.COMPLETED:
            return
        self.winner = self.team_id_for(winner_side) if winner_side is not None else None
        self.status = MatchStatus.COMPLETED
        self.add_feed(
            'match_completed',
            team_id=self.winner,
            description=f"{self.teams[winner_side].name} win" if winner_side is not None else "Draw"
        )

    # ------------------------------------------------------------------
    # Event application
    # ------------------------------------------------------------------

    def apply(self, event: ScoringEvent, auto_start: bool = True) -> 'BaseMatch':
        """
        Apply ``event`` to a working copy and return it.

        Runs the status guard, the sport mutator and then ``reevaluate``.
        ``self`` is left untouched whether or not the event is accepted.
        """
        if self.status.is_terminal:
            raise MatchClosedError(f"Match {self.id} is {self.status.value}")

        working = copy.deepcopy(self)
        if event.type in LIFECYCLE_EVENTS:
            working._apply_lifecycle(event)
        else:
            if working.status == MatchStatus.PAUSED:
                raise MatchNotLiveError(f"Match {self.id} is paused")
            if working.status == MatchStatus.SCHEDULED:
                if not auto_start:
                    raise MatchNotLiveError(f"Match {self.id} has not started")
                working._start(event, implicit=True)
            working._apply_event(event)
            working.reevaluate()
        working.updated_at = utcnow()
        return working

    def cancel(self, actor_id=None, reason: Optional[str] = None) -> 'BaseMatch':
        """Return a cancelled copy. Completed or already cancelled matches stay as they are."""
        if self.status.is_terminal:
            raise MatchClosedError(f"Match {self.id} is {self.status.value}")
        working = copy.deepcopy(self)
        working.status = MatchStatus.CANCELLED
        working.add_feed('match_cancelled', description=reason, meta={'by': actor_id})
        working.updated_at = utcnow()
        return working

    def _apply_lifecycle(self, event: ScoringEvent):
        if event.type == 'start':
            if self.status != MatchStatus.SCHEDULED:
                raise MatchNotLiveError(f"Match {self.id} is already {self.status.value}")
            self._start(event, implicit=False)
        elif event.type == 'pause':
            if self.status != MatchStatus.LIVE:
                raise MatchNotLiveError(f"Match {self.id} is not live")
            self.status = MatchStatus.PAUSED
            self.add_feed('match_paused', meta={'by': event.actor_id})
        elif event.type == 'resume':
            if self.status != MatchStatus.PAUSED:
                raise MatchNotLiveError(f"Match {self.id} is not paused")
            self.status = MatchStatus.LIVE
            self.add_feed('match_resumed', meta={'by': event.actor_id})

    def _start(self, event: ScoringEvent, implicit: bool):
        self.status = MatchStatus.LIVE
        self.add_feed('match_started', meta={'by': event.actor_id, 'implicit': implicit})

    def _apply_event(self, event: ScoringEvent):
        raise NotImplementedError

    def reevaluate(self):
        """Derive game/set/period closure and the match winner from current state."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        data = {
            '_id': self.id,
            'sport': self.sport,
            'title': self.title,
            'format': self.format,
            'location': self.location,
            'status': self.status.value,
            'startAt': to_iso(self.start_at),
            'durationMinutes': self.duration_minutes,
            'teams': [team.to_dict() for team in self.teams],
            'scoringUpdatedBy': list(self.scoring_updated_by),
            'createdBy': self.created_by,
            'winner': self.winner,
            'feed': [entry.to_dict() for entry in self.feed],
            'rules': dict(self.rules),
            'version': self.version,
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at)
        }
        data.update(self._variant_dict())
        return data

    def _variant_dict(self) -> Dict[str, Any]:
        return {}

    @classmethod
    def _variant_kwargs(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaseMatch':
        raw_id = data.get('_id', data.get('id'))
        kwargs = dict(
            id=str(raw_id) if raw_id is not None else new_id(),
            teams=[TeamRef.from_dict(t) for t in data.get('teams') or []],
            sport=(data.get('sport') or cls.SPORT).lower(),
            status=data.get('status', MatchStatus.SCHEDULED.value),
            title=data.get('title'),
            format=data.get('format'),
            location=data.get('location'),
            start_at=parse_datetime(data.get('startAt')),
            duration_minutes=data.get('durationMinutes'),
            scoring_updated_by=data.get('scoringUpdatedBy') or [],
            created_by=data.get('createdBy'),
            winner=data.get('winner'),
            feed=[FeedEntry.from_dict(f) for f in data.get('feed') or []],
            rules=data.get('rules') or {},
            version=data.get('version', 0),
            created_at=parse_datetime(data.get('createdAt')) or utcnow(),
            updated_at=parse_datetime(data.get('updatedAt')) or utcnow()
        )
        kwargs.update(cls._variant_kwargs(data))
        return cls(**kwargs)


def require(payload: Dict[str, Any], *keys: str):
    """Raise InvalidEventPayloadError naming every missing key."""
    missing = [key for key in keys if payload.get(key) in (None, '')]
    if missing:
        raise InvalidEventPayloadError(f"Payload missing required field(s): {', '.join(missing)}")


def optional_int(payload: Dict[str, Any], key: str) -> Optional[int]:
    value = payload.get(key)
    if value is None or value == '':
        return None
    # True and 2.9 would otherwise pass as 1 and 2
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidEventPayloadError(f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidEventPayloadError(f"{key} must be an integer")


def optional_str(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None or value == '':
        return None
    return str(value)
