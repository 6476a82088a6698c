# live_scoring/models/__init__.py

"""
Models Package

Per-sport match dataclasses sharing the ``BaseMatch`` envelope, and the
SQLAlchemy records they are stored in.
"""

from live_scoring.models.base import (
    BaseMatch, FeedEntry, LIFECYCLE_EVENTS, MatchStatus, PlayerRef, ScoringEvent, TeamRef
)
from live_scoring.models.rally import RallyEntry, RallyGame, RallyPointMatch, RallyVocabulary
from live_scoring.models.football import FootballMatch, Goal, Card, Substitution, ShootoutKick
from live_scoring.models.basketball import BasketballMatch, ScoreEvent, TeamCall
from live_scoring.models.badminton import BadmintonMatch, BADMINTON_VOCABULARY
from live_scoring.models.pickleball import PickleballMatch, PICKLEBALL_VOCABULARY
from live_scoring.models.volleyball import VolleyballMatch, VOLLEYBALL_VOCABULARY
from live_scoring.models.tennis import TennisMatch, TennisSet, TennisGame, TENNIS_VOCABULARY
from live_scoring.models.records import (
    MatchRecord, FootballMatchRecord, BasketballMatchRecord, BadmintonMatchRecord,
    TennisMatchRecord, VolleyballMatchRecord, PickleballMatchRecord
)

__all__ = [
    'BaseMatch', 'FeedEntry', 'LIFECYCLE_EVENTS', 'MatchStatus', 'PlayerRef', 'ScoringEvent', 'TeamRef',
    'RallyEntry', 'RallyGame', 'RallyPointMatch', 'RallyVocabulary',
    'FootballMatch', 'Goal', 'Card', 'Substitution', 'ShootoutKick',
    'BasketballMatch', 'ScoreEvent', 'TeamCall',
    'BadmintonMatch', 'BADMINTON_VOCABULARY',
    'PickleballMatch', 'PICKLEBALL_VOCABULARY',
    'VolleyballMatch', 'VOLLEYBALL_VOCABULARY',
    'TennisMatch', 'TennisSet', 'TennisGame', 'TENNIS_VOCABULARY',
    'MatchRecord', 'FootballMatchRecord', 'BasketballMatchRecord', 'BadmintonMatchRecord',
    'TennisMatchRecord', 'VolleyballMatchRecord', 'PickleballMatchRecord',
]
