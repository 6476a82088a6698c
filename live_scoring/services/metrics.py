# live_scoring/services/metrics.py

"""
Metrics Collection

Prometheus metrics for the scoring engine, kept on a private registry so
several app instances (tests) never collide on metric names.
"""

import logging
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

logger = logging.getLogger(__name__)


class MetricsCollector:
    """
    Counters and histograms for:
    - scoring events accepted and rejected
    - dispatch latency (lock wait included)
    - version conflicts
    - commentary requests and fallbacks
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()
        self._setup_metrics()

    def _setup_metrics(self):
        self.events_processed = Counter(
            'scoring_events_processed_total',
            'Scoring events accepted and broadcast',
            ['sport', 'event_type'],
            registry=self.registry
        )

        self.events_rejected = Counter(
            'scoring_events_rejected_total',
            'Scoring events rejected',
            ['error_code'],
            registry=self.registry
        )

        self.dispatch_duration = Histogram(
            'scoring_dispatch_duration_seconds',
            'Time from receiving an event to broadcasting the new state',
            ['sport'],
            registry=self.registry
        )

        self.version_conflicts = Counter(
            'scoring_version_conflicts_total',
            'Saves rejected because another writer committed first',
            ['sport'],
            registry=self.registry
        )

        self.commentary_requests = Counter(
            'commentary_requests_total',
            'Commentary generation requests',
            ['sport'],
            registry=self.registry
        )

        self.commentary_fallbacks = Counter(
            'commentary_fallbacks_total',
            'Commentary requests that produced nothing',
            ['reason'],
            registry=self.registry
        )

        self.rooms_joined = Counter(
            'scoring_room_joins_total',
            'Match room joins since start',
            registry=self.registry
        )

    def record_event(self, sport: str, event_type: str):
        self.events_processed.labels(sport=sport, event_type=event_type).inc()

    def record_rejection(self, error_code: str):
        self.events_rejected.labels(error_code=error_code).inc()

    def record_conflict(self, sport: str):
        self.version_conflicts.labels(sport=sport).inc()

    def record_commentary_request(self, sport: str):
        self.commentary_requests.labels(sport=sport).inc()

    def record_commentary_fallback(self, reason: str):
        self.commentary_fallbacks.labels(reason=reason).inc()

    def record_room_join(self):
        self.rooms_joined.inc()

    def get_metrics_text(self) -> str:
        """Get metrics in Prometheus text format."""
        return generate_latest(self.registry).decode('utf-8')
