# live_scoring/services/sport_resolver.py

"""
Sport Resolver

Maps a sport identifier to the match variant, its storage record class and
its rally vocabulary. The set of sports is closed: anything outside it fails
with ``UnknownSportError`` instead of falling back to a default model.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Type

from live_scoring.models import (
    BadmintonMatch, BadmintonMatchRecord, BaseMatch, BasketballMatch, BasketballMatchRecord,
    FootballMatch, FootballMatchRecord, MatchRecord, PickleballMatch, PickleballMatchRecord,
    RallyVocabulary, TennisMatch, TennisMatchRecord, VolleyballMatch, VolleyballMatchRecord
)
from live_scoring.services.errors import UnknownSportError


@dataclass(frozen=True)
class SportHandle:
    sport: str
    match_class: Type[BaseMatch]
    record_class: Type[MatchRecord]
    rally_vocabulary: Optional[RallyVocabulary] = None

    @property
    def is_rally_sport(self) -> bool:
        return self.rally_vocabulary is not None


_HANDLES = {
    'football': SportHandle('football', FootballMatch, FootballMatchRecord),
    'basketball': SportHandle('basketball', BasketballMatch, BasketballMatchRecord),
    'badminton': SportHandle('badminton', BadmintonMatch, BadmintonMatchRecord, BadmintonMatch.VOCABULARY),
    'tennis': SportHandle('tennis', TennisMatch, TennisMatchRecord, TennisMatch.VOCABULARY),
    'volleyball': SportHandle('volleyball', VolleyballMatch, VolleyballMatchRecord, VolleyballMatch.VOCABULARY),
    'pickleball': SportHandle('pickleball', PickleballMatch, PickleballMatchRecord, PickleballMatch.VOCABULARY),
}


def supported_sports() -> Tuple[str, ...]:
    return tuple(_HANDLES)


def resolve_sport(sport) -> SportHandle:
    """Resolve ``sport`` case-insensitively, ignoring surrounding whitespace."""
    if not isinstance(sport, str) or not sport.strip():
        raise UnknownSportError(f"Unknown sport type: {sport!r}")
    handle = _HANDLES.get(sport.strip().lower())
    if handle is None:
        raise UnknownSportError(f"Unknown sport type: {sport}")
    return handle
