# live_scoring/core/session_manager.py

import logging
from contextlib import contextmanager

from live_scoring.core import db

logger = logging.getLogger(__name__)


@contextmanager
def managed_session():
    """
    Context manager for a database session that ensures proper transaction handling.

    Yields the Flask-SQLAlchemy scoped session bound to the current application
    context. On exit, the session is committed, or in case of an exception,
    rolled back and the exception re-raised.
    """
    session = db.session
    try:
        yield session
        session.commit()
    except Exception as e:
        logger.error(f"Session error: {e}")
        try:
            session.rollback()
        except Exception as rollback_error:
            logger.warning(f"Rollback failed (non-critical): {rollback_error}")
        raise
