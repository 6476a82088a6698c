# live_scoring/services/commentary/augmenter.py

"""
Commentary Augmenter

Best-effort one-line commentary for accepted events. Runs after the
authoritative update has been committed and broadcast, never holds the match
lock, and turns every failure into "no commentary".
"""

import json
import logging
from typing import Any, Callable, Dict, Optional

from live_scoring.models import BaseMatch, ScoringEvent
from live_scoring.services.commentary.ai_client import AICommentaryClient, AICommentaryError
from live_scoring.services.errors import CommentaryUnavailableError

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
You are a professional sports commentator.
Sport: {sport}

Latest Event:
{event}

Match Snapshot:
{snapshot}

Generate a concise, energetic one-line live commentary update.
Do not repeat old info. Use natural tone (like a human commentator).
Keep it under 25 words.
"""

# Bulky or private fields left out of the prompt
_SNAPSHOT_EXCLUDE = frozenset({
    'feed', 'scoringUpdatedBy', 'createdBy', 'rules', 'createdAt', 'updatedAt', 'version', 'rallyLog'
})


def match_snapshot(match: BaseMatch) -> Dict[str, Any]:
    """Compact view of the match for the prompt: no rally logs, no feed, no rosters."""

    def prune(value):
        if isinstance(value, dict):
            return {k: prune(v) for k, v in value.items() if k not in _SNAPSHOT_EXCLUDE and k != 'players'}
        if isinstance(value, list):
            return [prune(v) for v in value]
        return value

    return prune(match.to_dict())


def build_prompt(sport: str, event: ScoringEvent, match: BaseMatch) -> str:
    return PROMPT_TEMPLATE.format(
        sport=sport,
        event=json.dumps({'type': event.type, 'payload': event.payload}, indent=2, default=str),
        snapshot=json.dumps(match_snapshot(match), indent=2, default=str)
    )


class CommentaryAugmenter:
    """
    Produces commentary for an accepted event.

    ``spawn`` runs a callable in the background; under the app it is
    ``socketio.start_background_task``.
    """

    def __init__(self, client: AICommentaryClient, spawn: Callable = None, metrics=None, enabled: bool = True):
        self.client = client
        self.spawn = spawn
        self.metrics = metrics
        self.enabled = enabled and client.enabled

    def describe(self, sport: str, event: ScoringEvent, match: BaseMatch) -> Optional[str]:
        """Return one line of commentary, or None when none could be produced."""
        if not self.enabled:
            return None
        if self.metrics:
            self.metrics.record_commentary_request(sport)
        try:
            return self._generate(sport, event, match)
        except CommentaryUnavailableError as e:
            logger.warning(f"🎙️ No commentary for {sport} match {match.id} ({event.type}): {e}")
            if self.metrics:
                self.metrics.record_commentary_fallback('unavailable')
            return None
        except Exception as e:
            logger.error(f"🎙️ Commentary generation crashed for match {match.id}: {e}", exc_info=True)
            if self.metrics:
                self.metrics.record_commentary_fallback('error')
            return None

    def _generate(self, sport: str, event: ScoringEvent, match: BaseMatch) -> str:
        try:
            return self.client.generate(build_prompt(sport, event, match))
        except AICommentaryError as e:
            raise CommentaryUnavailableError(str(e)) from e

    def schedule(self, sport: str, event: ScoringEvent, match: BaseMatch, publish: Callable[[str], None]):
        """
        Generate commentary in the background and hand it to ``publish``.

        ``publish`` is only called when commentary text came back.
        """
        if not self.enabled or self.spawn is None:
            return

        def task():
            commentary = self.describe(sport, event, match)
            if commentary:
                publish(commentary)

        self.spawn(task)
