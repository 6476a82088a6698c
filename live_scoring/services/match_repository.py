# live_scoring/services/match_repository.py

"""
Match Repository

Loads and saves match documents. Saves are compare-and-swap on the record's
version counter: a save only lands if the stored version is still the one the
match was loaded with. Transient database errors are retried a bounded number
of times; a version conflict is never retried here, the dispatcher decides
what to do with it.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Type

from sqlalchemy.exc import DisconnectionError, OperationalError, SQLAlchemyError
from tenacity import (
    Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_exponential
)

from live_scoring.core.session_manager import managed_session
from live_scoring.models import BaseMatch, MatchRecord
from live_scoring.services.errors import MatchNotFoundError, PersistenceError, VersionConflictError
from live_scoring.services.sport_resolver import resolve_sport

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (OperationalError, DisconnectionError)


class MatchRepository:
    """Document-store facade over the ``matches`` table."""

    def __init__(self, max_attempts: int = 3, wait_min: float = 0.05, wait_max: float = 1.0):
        self.max_attempts = max_attempts
        self._retrying = Retrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=0.05, min=wait_min, max=wait_max),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True
        )

    @classmethod
    def from_config(cls, config) -> 'MatchRepository':
        return cls(max_attempts=int(config.get('PERSISTENCE_MAX_ATTEMPTS', 3)))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_by_id(self, match_id, record_class: Optional[Type[MatchRecord]] = None) -> Optional[BaseMatch]:
        """
        Load a match, or None when it does not exist.

        With ``record_class`` the lookup is scoped to that sport: a match stored
        under another sport is not found.
        """
        query = (record_class or MatchRecord).query.populate_existing()
        record = query.filter_by(id=str(match_id)).first()
        if record is None:
            return None
        return self._to_match(record)

    def get(self, match_id, record_class: Optional[Type[MatchRecord]] = None) -> BaseMatch:
        match = self.find_by_id(match_id, record_class)
        if match is None:
            raise MatchNotFoundError(f"Match {match_id} not found")
        return match

    def current_version(self, match_id) -> Optional[int]:
        """Stored version of a match, or None when it does not exist."""
        return (
            MatchRecord.query
            .with_entities(MatchRecord.version)
            .filter_by(id=str(match_id))
            .scalar()
        )

    def find_completed(self, sport: str) -> List[BaseMatch]:
        handle = resolve_sport(sport)
        records = (
            handle.record_class.query
            .filter_by(status='completed')
            .order_by(MatchRecord.created_at, MatchRecord.id)
            .all()
        )
        return [self._to_match(record) for record in records]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, match: BaseMatch) -> BaseMatch:
        handle = resolve_sport(match.sport)
        match.version = 1
        try:
            self._retrying(self._insert, handle.record_class, match)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create match {match.id}: {e}", exc_info=True)
            raise PersistenceError(f"Could not create match {match.id}")
        logger.info(f"Created {match.sport} match {match.id}")
        return match

    def save(self, match: BaseMatch) -> BaseMatch:
        """
        Persist ``match`` if nobody saved since it was loaded.

        On success ``match.version`` is advanced to the stored version and the
        same object is returned. Raises VersionConflictError when another
        writer got there first and PersistenceError when the database keeps
        failing.
        """
        try:
            new_version = self._retrying(self._compare_and_swap, match)
        except SQLAlchemyError as e:
            logger.error(f"Failed to save match {match.id} after {self.max_attempts} attempt(s): {e}",
                         exc_info=True)
            raise PersistenceError(f"Could not save match {match.id}")
        match.version = new_version
        return match

    def _insert(self, record_class: Type[MatchRecord], match: BaseMatch):
        with managed_session() as session:
            session.add(record_class(
                id=match.id,
                status=match.status.value,
                version=match.version,
                document=match.to_dict()
            ))

    def _compare_and_swap(self, match: BaseMatch) -> int:
        expected = match.version
        new_version = expected + 1
        document = match.to_dict()
        document['version'] = new_version
        with managed_session() as session:
            updated = (
                session.query(MatchRecord)
                .filter(MatchRecord.id == match.id, MatchRecord.version == expected)
                .update({
                    MatchRecord.document: document,
                    MatchRecord.status: match.status.value,
                    MatchRecord.version: new_version,
                    MatchRecord.updated_at: datetime.now(timezone.utc)
                }, synchronize_session=False)
            )
            if updated == 0:
                if session.query(MatchRecord.id).filter_by(id=match.id).first() is None:
                    raise MatchNotFoundError(f"Match {match.id} not found")
                raise VersionConflictError(f"Match {match.id} was modified concurrently (expected v{expected})")
        return new_version

    # ------------------------------------------------------------------

    @staticmethod
    def _to_match(record: MatchRecord) -> BaseMatch:
        handle = resolve_sport(record.sport)
        document = dict(record.document or {})
        document['_id'] = record.id
        document['version'] = record.version
        document['status'] = record.status
        return handle.match_class.from_dict(document)
