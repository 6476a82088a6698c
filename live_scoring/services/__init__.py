# live_scoring/services/__init__.py

"""
Scoring services layer.

- sport_resolver: sport id to match variant and storage
- dispatcher: lock, authorize, apply, persist, broadcast
- match_repository / locks: storage and per-match serialization
- commentary: best-effort AI commentary
- leaderboard: rankings over completed matches
- match_management: create, read and cancel matches

Only the error taxonomy is re-exported here; the models package depends on
it, so importing the heavier services at package level would be circular.
"""

from .errors import (
    ScoringError,
    UnknownSportError,
    MatchNotFoundError,
    NotAuthorizedError,
    MatchClosedError,
    MatchNotLiveError,
    InvalidEventPayloadError,
    UnknownTeamError,
    MatchBusyError,
    PersistenceError,
    VersionConflictError,
    CommentaryUnavailableError,
)
