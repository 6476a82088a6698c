# live_scoring/services/dispatcher.py

"""
Event Dispatcher

Single entry point for scoring events. For one event it:

1. resolves the sport
2. takes the per-match lock
3. loads the match and checks the actor may score it
4. applies the event to a working copy (status guard, sport mutator, reevaluate)
5. saves with a version check, reloading and re-applying on conflict
6. broadcasts the saved state while still holding the lock
7. schedules commentary once the lock is released; it reaches the room only
   if no newer version of the match was committed in the meantime

Anything that goes wrong surfaces as a ``ScoringError`` for the caller to
report back to the actor; nothing is broadcast for a rejected event.
"""

import logging
import time
from contextlib import nullcontext
from typing import Any, Dict, Iterable, Optional, Union

from flask import current_app, has_app_context

from live_scoring.models import BaseMatch, ScoringEvent
from live_scoring.services.errors import (
    InvalidEventPayloadError, MatchNotFoundError, NotAuthorizedError, ScoringError, VersionConflictError
)
from live_scoring.services.sport_resolver import SportHandle, resolve_sport

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Serializes, authorizes, applies, persists and broadcasts scoring events."""

    def __init__(
        self,
        repository,
        locks,
        broadcaster=None,
        commentary=None,
        metrics=None,
        auto_start: bool = True,
        max_conflict_retries: int = 2
    ):
        self.repository = repository
        self.locks = locks
        self.broadcaster = broadcaster
        self.commentary = commentary
        self.metrics = metrics
        self.auto_start = auto_start
        self.max_conflict_retries = max_conflict_retries

    def handle_wire_event(self, data: Dict[str, Any], actor_id) -> BaseMatch:
        """Handle an event in the client shape ``{matchId, sport, type, payload}``."""
        event = ScoringEvent.from_wire(data, actor_id)
        return self.handle_event(event.match_id, event.sport, event.type, event.payload, event.actor_id)

    def handle_event(self, match_id, sport, event_type: str, payload: Optional[Dict[str, Any]], actor_id) -> BaseMatch:
        """
        Apply one scoring event and return the saved match.

        Raises a ScoringError subclass when the event is rejected; the stored
        match is then unchanged and nothing has been broadcast.
        """
        started = time.time()
        try:
            handle = resolve_sport(sport)
            event = self._build_event(handle, match_id, event_type, payload, actor_id)
            with self.locks.hold(event.match_id):
                match = self._apply_and_save(handle, event)
                self._broadcast_update(handle, event, match)
        except ScoringError as e:
            logger.info(f"⛔ Rejected {event_type!r} for {sport} match {match_id} from {actor_id}: "
                        f"{e.error_code} {e.message}")
            if self.metrics:
                self.metrics.record_rejection(e.error_code)
            raise

        if self.metrics:
            self.metrics.record_event(handle.sport, event.type)
            self.metrics.dispatch_duration.labels(sport=handle.sport).observe(time.time() - started)
        logger.info(f"✅ {handle.sport} match {match.id} v{match.version}: {event.type} by {actor_id}")

        self._schedule_commentary(handle, event, match)
        return match

    @staticmethod
    def _build_event(handle: SportHandle, match_id, event_type, payload, actor_id) -> ScoringEvent:
        if match_id is None or str(match_id).strip() == '':
            raise InvalidEventPayloadError("Match ID is required")
        if not isinstance(event_type, str) or not event_type.strip():
            raise InvalidEventPayloadError("Event type is required")
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise InvalidEventPayloadError("Event payload must be an object")
        return ScoringEvent(
            type=event_type.strip(),
            payload=payload,
            actor_id=str(actor_id) if actor_id is not None else None,
            match_id=str(match_id),
            sport=handle.sport
        )

    def _apply_and_save(self, handle: SportHandle, event: ScoringEvent) -> BaseMatch:
        conflicts = 0
        while True:
            match = self.repository.find_by_id(event.match_id, handle.record_class)
            if match is None:
                raise MatchNotFoundError(f"Match {event.match_id} not found")
            if not match.is_authorized(event.actor_id):
                raise NotAuthorizedError(f"User {event.actor_id} is not allowed to score match {match.id}")

            working = match.apply(event, auto_start=self.auto_start)
            try:
                return self.repository.save(working)
            except VersionConflictError:
                conflicts += 1
                if self.metrics:
                    self.metrics.record_conflict(handle.sport)
                if conflicts > self.max_conflict_retries:
                    raise
                logger.warning(f"Version conflict on match {match.id}, re-applying "
                               f"({conflicts}/{self.max_conflict_retries})")

    def _broadcast_update(self, handle: SportHandle, event: ScoringEvent, match: BaseMatch):
        if self.broadcaster is None:
            return
        self.broadcaster.match_updated(handle.sport, event.type, match)

    def _schedule_commentary(self, handle: SportHandle, event: ScoringEvent, match: BaseMatch):
        if self.commentary is None or self.broadcaster is None:
            return

        # Background tasks run outside the request's app context
        app = current_app._get_current_object() if has_app_context() else None

        def publish(commentary: str):
            with app.app_context() if app is not None else nullcontext():
                self._publish_commentary(handle, event, match, commentary)

        self.commentary.schedule(handle.sport, event, match, publish)

    def _publish_commentary(self, handle: SportHandle, event: ScoringEvent, match: BaseMatch, commentary: str):
        """
        Broadcast commentary only while ``match`` is still the latest committed
        version, so the room never receives an older document after a newer one.
        """
        try:
            with self.locks.hold(match.id):
                latest = self.repository.current_version(match.id)
                if latest != match.version:
                    logger.info(f"🎙️ Dropping commentary for match {match.id} v{match.version}, now at v{latest}")
                    if self.metrics:
                        self.metrics.record_commentary_fallback('stale')
                    return
                self.broadcaster.match_commentary(handle.sport, event.type, match, commentary)
        except ScoringError as e:
            logger.warning(f"🎙️ Commentary for match {match.id} not published: {e.message}")
            if self.metrics:
                self.metrics.record_commentary_fallback('busy')


def replay_events(
    initial: BaseMatch,
    events: Iterable[Union[ScoringEvent, Dict[str, Any]]],
    auto_start: bool = True
) -> BaseMatch:
    """
    Fold ``events`` over ``initial`` without touching storage.

    Events are ``ScoringEvent`` objects or ``{type, payload}`` dicts. The
    result depends only on ``initial`` and the ordered event list.
    """
    match = initial
    for item in events:
        if isinstance(item, dict):
            item = ScoringEvent(type=item['type'], payload=item.get('payload') or {},
                                actor_id=item.get('actorId'), match_id=initial.id, sport=initial.sport)
        match = match.apply(item, auto_start=auto_start)
    return match
