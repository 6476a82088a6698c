# wsgi.py

import eventlet
eventlet.monkey_patch()

import logging
import os

from live_scoring import create_app
from live_scoring.core import socketio

logger = logging.getLogger(__name__)

app = create_app(os.getenv('LIVE_SCORING_CONFIG', 'web_config.Config'))

if __name__ == '__main__':
    host = os.getenv('HOST', '0.0.0.0')
    port = int(os.getenv('PORT', 5000))
    logger.info(f"🚀 Starting live scoring server on {host}:{port}")
    socketio.run(app, host=host, port=port)
