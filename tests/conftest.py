"""
Pytest configuration and shared fixtures for all tests.
"""
import os
import sys
from unittest.mock import Mock

import pytest
from flask_jwt_extended import create_access_token

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from live_scoring import create_app
from live_scoring.core import db as _db, socketio as _socketio
from live_scoring.models import MatchRecord
from live_scoring.services.dispatcher import EventDispatcher
from live_scoring.services.locks import MatchLockRegistry
from live_scoring.services.match_repository import MatchRepository
from live_scoring.services.metrics import MetricsCollector
from live_scoring.sockets import MatchBroadcaster
from web_config import TestingConfig

from tests.factories import SCORER_ID, build_match, persist


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing, backed by a file SQLite database."""
    db_path = tmp_path_factory.mktemp('data') / 'live_scoring.db'

    class Config(TestingConfig):
        # A file database so worker threads get their own connections
        SQLALCHEMY_DATABASE_URI = f'sqlite:///{db_path}'

    app = create_app(Config)

    ctx = app.app_context()
    ctx.push()

    yield app

    ctx.pop()


@pytest.fixture
def db(app):
    """Empty matches table for each test."""
    _db.session.query(MatchRecord).delete()
    _db.session.commit()

    yield _db

    _db.session.rollback()
    _db.session.query(MatchRecord).delete()
    _db.session.commit()
    _db.session.remove()


@pytest.fixture
def client(app, db):
    """Create Flask test client."""
    return app.test_client()


# Services
@pytest.fixture
def repository(db):
    return MatchRepository(max_attempts=1)


@pytest.fixture
def locks():
    return MatchLockRegistry(timeout=2.0)


@pytest.fixture
def broadcaster():
    return Mock(spec=MatchBroadcaster)


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def dispatcher(repository, locks, broadcaster, metrics):
    return EventDispatcher(repository, locks, broadcaster=broadcaster, metrics=metrics)


@pytest.fixture
def stored_match(repository):
    """Persist a freshly built match of ``sport``."""
    def _stored_match(sport, **kwargs):
        return persist(repository, build_match(sport, **kwargs))
    return _stored_match


# Authentication
@pytest.fixture
def token_for(app):
    def _token_for(user_id=SCORER_ID):
        return create_access_token(identity=str(user_id))
    return _token_for


@pytest.fixture
def auth_headers(token_for):
    def _auth_headers(user_id=SCORER_ID):
        return {'Authorization': f'Bearer {token_for(user_id)}'}
    return _auth_headers


@pytest.fixture
def socket_client(app, db, token_for):
    """Connect Socket.IO test clients; all are disconnected after the test."""
    clients = []

    def _socket_client(user_id=SCORER_ID, auth=None):
        if auth is None and user_id is not None:
            auth = {'token': token_for(user_id)}
        test_client = _socketio.test_client(app, auth=auth)
        clients.append(test_client)
        return test_client

    yield _socket_client

    for test_client in clients:
        if test_client.is_connected():
            test_client.disconnect()
