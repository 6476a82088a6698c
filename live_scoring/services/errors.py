# live_scoring/services/errors.py

"""
Scoring Errors

Exception taxonomy for the scoring engine. Every error carries a stable
``error_code`` so transports can report it to the originating client without
string matching on messages.
"""


class ScoringError(Exception):
    """Base exception for scoring engine errors."""

    error_code = "SCORING_ERROR"

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> dict:
        return {'code': self.error_code, 'message': self.message}


class UnknownSportError(ScoringError):
    """Raised when a sport identifier is not one of the supported sports."""
    error_code = "UNKNOWN_SPORT"


class MatchNotFoundError(ScoringError):
    """Raised when the referenced match does not exist."""
    error_code = "MATCH_NOT_FOUND"


class NotAuthorizedError(ScoringError):
    """Raised when the actor is not an authorized scorer for the match."""
    error_code = "NOT_AUTHORIZED"


class MatchClosedError(ScoringError):
    """Raised when an event targets a completed or cancelled match."""
    error_code = "MATCH_CLOSED"


class MatchNotLiveError(ScoringError):
    """Raised when a scoring event targets a paused (or not yet started) match."""
    error_code = "MATCH_NOT_LIVE"


class InvalidEventPayloadError(ScoringError):
    """Raised when an event payload is missing fields or names an unsupported type."""
    error_code = "INVALID_PAYLOAD"


class UnknownTeamError(InvalidEventPayloadError):
    """Raised when a team reference matches neither side of the match."""
    error_code = "UNKNOWN_TEAM"


class MatchBusyError(ScoringError):
    """Raised when the per-match lock could not be acquired in time."""
    error_code = "MATCH_BUSY"


class PersistenceError(ScoringError):
    """Raised when a match document could not be saved."""
    error_code = "PERSISTENCE_FAILED"


class VersionConflictError(PersistenceError):
    """Raised when another writer committed the match first."""
    error_code = "VERSION_CONFLICT"


class CommentaryUnavailableError(Exception):
    """Raised inside the commentary augmenter when no commentary can be produced."""
    pass
