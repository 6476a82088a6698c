# live_scoring/models/records.py

"""
Match Document Storage

Every match is stored as one JSON document in the ``matches`` table. The
``sport`` column doubles as the single-table-inheritance discriminator, so
each ``<Sport>MatchRecord`` subclass behaves as a sport-scoped collection:
querying it only ever returns matches of that sport.
"""

import logging
from datetime import datetime, timezone

from live_scoring.core import db

logger = logging.getLogger(__name__)


def _utcnow():
    return datetime.now(timezone.utc)


class MatchRecord(db.Model):
    """Persisted match document with its compare-and-swap version counter."""
    __tablename__ = 'matches'

    id = db.Column(db.String(64), primary_key=True)
    sport = db.Column(db.String(20), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default='scheduled', index=True)
    # Optimistic locking: saves are conditional on the version they loaded
    version = db.Column(db.Integer, nullable=False, default=1)
    document = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    __mapper_args__ = {
        'polymorphic_on': sport,
        'polymorphic_identity': 'match'
    }

    def __repr__(self):
        return f'<MatchRecord {self.sport}:{self.id} v{self.version} {self.status}>'

    def to_dict(self):
        return {
            'id': self.id,
            'sport': self.sport,
            'status': self.status,
            'version': self.version,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class FootballMatchRecord(MatchRecord):
    __mapper_args__ = {'polymorphic_identity': 'football'}


class BasketballMatchRecord(MatchRecord):
    __mapper_args__ = {'polymorphic_identity': 'basketball'}


class BadmintonMatchRecord(MatchRecord):
    __mapper_args__ = {'polymorphic_identity': 'badminton'}


class TennisMatchRecord(MatchRecord):
    __mapper_args__ = {'polymorphic_identity': 'tennis'}


class VolleyballMatchRecord(MatchRecord):
    __mapper_args__ = {'polymorphic_identity': 'volleyball'}


class PickleballMatchRecord(MatchRecord):
    __mapper_args__ = {'polymorphic_identity': 'pickleball'}
