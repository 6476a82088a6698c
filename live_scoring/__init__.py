# live_scoring/__init__.py

"""
Live Scoring Application Package

Application factory for the live match scoring engine. ``create_app`` loads
configuration, initializes logging and the shared extensions, wires the
scoring services together and registers the Socket.IO handlers and HTTP
blueprint.
"""

import logging
import logging.config

from flask import Flask

from live_scoring.core import db, jwt, socketio

logger = logging.getLogger(__name__)


def create_app(config_object='web_config.Config'):
    """
    Application factory function for creating a Flask app instance.

    Args:
        config_object: The configuration object to load (default is 'web_config.Config').

    Returns:
        A configured Flask application instance.
    """
    app = Flask(__name__)
    app.config.from_object(config_object)

    # SECRET_KEY is mandatory
    if not app.config.get('SECRET_KEY'):
        raise RuntimeError('SECRET_KEY must be set')

    init_logging(app)
    init_database(app)
    jwt.init_app(app)
    init_socketio(app)
    init_services(app)

    from live_scoring.routes import scoring_bp
    app.register_blueprint(scoring_bp)

    logger.info("🎯 Live scoring engine initialized")
    return app


def init_logging(app):
    """Console-only logging for tests, the full dictConfig otherwise."""
    if app.config.get('TESTING'):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
        ))
        root_logger = logging.getLogger()
        root_logger.handlers = [console_handler]
        root_logger.setLevel(logging.WARNING)
    else:
        from live_scoring.log_config.logging_config import build_logging_config
        logging.config.dictConfig(build_logging_config(app.config.get('LOG_LEVEL', 'INFO')))


def init_database(app):
    from live_scoring import models  # noqa: F401  (registers the mapped tables)

    db.init_app(app)
    if app.config.get('AUTO_CREATE_TABLES', True):
        with app.app_context():
            db.create_all()


def init_socketio(app):
    kwargs = {}
    if app.config.get('SOCKETIO_MESSAGE_QUEUE'):
        kwargs['message_queue'] = app.config['SOCKETIO_MESSAGE_QUEUE']
    if app.config.get('SOCKETIO_ASYNC_MODE'):
        kwargs['async_mode'] = app.config['SOCKETIO_ASYNC_MODE']
    socketio.init_app(app, cors_allowed_origins=app.config.get('CORS_ORIGINS', '*'), **kwargs)

    # Handlers register on import, after init_app
    from live_scoring.sockets import register_socket_handlers
    register_socket_handlers()


def init_services(app):
    """Build the scoring services once per app and expose them on ``app.extensions``."""
    from live_scoring.services.commentary import AICommentaryClient, CommentaryAugmenter
    from live_scoring.services.dispatcher import EventDispatcher
    from live_scoring.services.leaderboard import LeaderboardService
    from live_scoring.services.locks import MatchLockRegistry
    from live_scoring.services.match_management import MatchManagementService
    from live_scoring.services.match_repository import MatchRepository
    from live_scoring.services.metrics import MetricsCollector
    from live_scoring.sockets import MatchBroadcaster

    config = app.config
    metrics = MetricsCollector()
    repository = MatchRepository.from_config(config)
    locks = MatchLockRegistry.from_config(config)
    broadcaster = MatchBroadcaster(socketio)

    commentary = None
    if config.get('COMMENTARY_ENABLED'):
        commentary = CommentaryAugmenter(
            AICommentaryClient.from_config(config),
            spawn=socketio.start_background_task,
            metrics=metrics
        )
        if not commentary.enabled:
            logger.warning("🤖 Commentary enabled but no API key configured; commentary is off")

    dispatcher = EventDispatcher(
        repository,
        locks,
        broadcaster=broadcaster,
        commentary=commentary,
        metrics=metrics,
        auto_start=config.get('SCORING_AUTO_START', True),
        max_conflict_retries=int(config.get('SCORING_MAX_CONFLICT_RETRIES', 2))
    )

    app.extensions['live_scoring'] = {
        'repository': repository,
        'locks': locks,
        'broadcaster': broadcaster,
        'metrics': metrics,
        'dispatcher': dispatcher,
        'matches': MatchManagementService(repository, locks, broadcaster=broadcaster),
        'leaderboard': LeaderboardService(repository, limit=int(config.get('LEADERBOARD_LIMIT', 20))),
    }
