# live_scoring/log_config/logging_config.py

"""
Logging configuration for the application.

Dictionary-based setup for Python's logging module: console output plus
rotating files for the scoring engine, its socket traffic and errors.
"""

import logging.handlers
import os

LOG_DIR = os.getenv('LOG_DIR', 'logs')


def build_logging_config(level: str = 'INFO') -> dict:
    """Return the dictConfig for ``level``, creating the log directory if needed."""
    os.makedirs(LOG_DIR, exist_ok=True)
    level = (level or 'INFO').upper()

    return {
        'version': 1,
        'disable_existing_loggers': False,

        'formatters': {
            'detailed': {
                'format': '%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s'
            },
            'simple': {
                'format': '%(asctime)s [%(levelname)s] %(message)s'
            },
            'focused': {
                'format': '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
            }
        },

        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'simple',
                'level': level,
            },
            'scoring_file': {
                'class': 'logging.handlers.RotatingFileHandler',
                'filename': os.path.join(LOG_DIR, 'scoring.log'),
                'formatter': 'focused',
                'level': level,
                'maxBytes': 26214400,   # 25MB
                'backupCount': 3,
                'encoding': 'utf-8'
            },
            'sockets_file': {
                'class': 'logging.handlers.RotatingFileHandler',
                'filename': os.path.join(LOG_DIR, 'sockets.log'),
                'formatter': 'focused',
                'level': level,
                'maxBytes': 10485760,   # 10MB
                'backupCount': 2,
                'encoding': 'utf-8'
            },
            'errors_file': {
                'class': 'logging.handlers.RotatingFileHandler',
                'filename': os.path.join(LOG_DIR, 'errors.log'),
                'formatter': 'detailed',
                'level': 'WARNING',
                'maxBytes': 26214400,   # 25MB
                'backupCount': 3,
                'encoding': 'utf-8'
            }
        },

        'loggers': {
            'sqlalchemy.engine': {
                'handlers': ['errors_file'],
                'level': 'ERROR',
                'propagate': False
            },
            'live_scoring.services': {
                'handlers': ['console', 'scoring_file', 'errors_file'],
                'level': level,
                'propagate': False
            },
            'live_scoring.sockets': {
                'handlers': ['console', 'sockets_file', 'errors_file'],
                'level': level,
                'propagate': False
            },
            'engineio': {
                'handlers': ['console'],
                'level': 'WARNING',
                'propagate': False
            },
            'socketio': {
                'handlers': ['console'],
                'level': 'WARNING',
                'propagate': False
            },
            'werkzeug': {
                'handlers': ['console'],
                'level': 'WARNING',
                'propagate': False
            }
        },

        'root': {
            'handlers': ['console', 'errors_file'],
            'level': level
        }
    }
