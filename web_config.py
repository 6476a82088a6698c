"""
Web Configuration Module

This module defines the configuration settings for the live scoring
application, including database, JWT, Socket.IO, locking, commentary and
leaderboard settings. Values are loaded primarily from environment variables.
"""

from datetime import timedelta
import os


def _env_bool(name, default):
    return os.getenv(name, default).lower() == 'true'


class Config:
    """Application configuration settings."""
    # Basic Flask/App Configuration
    SECRET_KEY = os.getenv('SECRET_KEY')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Database Configuration
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///live_scoring.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
    }
    AUTO_CREATE_TABLES = _env_bool('AUTO_CREATE_TABLES', 'true')
    PERSISTENCE_MAX_ATTEMPTS = int(os.getenv('PERSISTENCE_MAX_ATTEMPTS', 3))

    # JWT Configuration
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', SECRET_KEY)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.getenv('JWT_ACCESS_TOKEN_HOURS', 24)))
    JWT_TOKEN_LOCATION = ['headers']

    # Redis / Socket.IO
    REDIS_URL = os.getenv('REDIS_URL', 'redis://redis:6379/0')
    SOCKETIO_MESSAGE_QUEUE = os.getenv('SOCKETIO_MESSAGE_QUEUE')
    SOCKETIO_ASYNC_MODE = os.getenv('SOCKETIO_ASYNC_MODE')
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

    # Per-match serialization: 'memory' for one process, 'redis' across workers
    MATCH_LOCK_BACKEND = os.getenv('MATCH_LOCK_BACKEND', 'memory')
    MATCH_LOCK_TIMEOUT_SECONDS = float(os.getenv('MATCH_LOCK_TIMEOUT_SECONDS', 5))

    # Scoring engine
    SCORING_AUTO_START = _env_bool('SCORING_AUTO_START', 'true')
    SCORING_MAX_CONFLICT_RETRIES = int(os.getenv('SCORING_MAX_CONFLICT_RETRIES', 2))
    LEADERBOARD_LIMIT = int(os.getenv('LEADERBOARD_LIMIT', 20))

    # AI commentary
    COMMENTARY_ENABLED = _env_bool('COMMENTARY_ENABLED', 'true')
    COMMENTARY_API_KEY = os.getenv('OPENAI_API_KEY') or os.getenv('GPT_API')
    COMMENTARY_MODEL = os.getenv('COMMENTARY_MODEL', 'gpt-4o-mini')
    COMMENTARY_API_URL = os.getenv('COMMENTARY_API_URL')
    COMMENTARY_TIMEOUT_SECONDS = float(os.getenv('COMMENTARY_TIMEOUT_SECONDS', 2.5))


class DevelopmentConfig(Config):
    """Local development: verbose logs, in-process locks."""
    DEBUG = True
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key')
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', SECRET_KEY)


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}

    # Test secrets
    SECRET_KEY = 'test-secret-key-for-testing'
    JWT_SECRET_KEY = 'test-jwt-secret-for-testing'

    SOCKETIO_MESSAGE_QUEUE = None
    SOCKETIO_ASYNC_MODE = 'threading'
    MATCH_LOCK_BACKEND = 'memory'
    MATCH_LOCK_TIMEOUT_SECONDS = 2.0
    PERSISTENCE_MAX_ATTEMPTS = 1

    # No external AI calls in tests
    COMMENTARY_ENABLED = False
    COMMENTARY_API_KEY = None
