# live_scoring/services/locks.py

"""
Per-Match Locks

At most one mutation per match is in flight at any time. A single process
uses one ``threading.Lock`` per match id; deployments running several
workers switch to Redis locks so the guarantee holds across processes.
"""

import logging
import threading
from contextlib import contextmanager

import redis
from redis.exceptions import LockError

from live_scoring.services.errors import MatchBusyError

logger = logging.getLogger(__name__)


class _LocalLock:
    """A match lock plus the number of callers holding or waiting for it."""
    __slots__ = ('lock', 'users')

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class MatchLockRegistry:
    """
    Hands out one lock per match id.

    Local entries live only while someone holds or waits for them, so ids
    that are never seen again leave nothing behind.
    """

    def __init__(self, timeout: float = 5.0, redis_client=None, redis_lock_ttl: int = 30):
        self.timeout = timeout
        self.redis_client = redis_client
        self.redis_lock_ttl = redis_lock_ttl
        self._locks = {}  # match_id -> _LocalLock
        self._mutex = threading.Lock()  # protects _locks

    @classmethod
    def from_config(cls, config) -> 'MatchLockRegistry':
        timeout = float(config.get('MATCH_LOCK_TIMEOUT_SECONDS', 5))
        if config.get('MATCH_LOCK_BACKEND', 'memory') == 'redis':
            client = redis.Redis.from_url(config['REDIS_URL'])
            logger.info("Using Redis match locks")
            return cls(timeout=timeout, redis_client=client)
        return cls(timeout=timeout)

    @property
    def distributed(self) -> bool:
        return self.redis_client is not None

    def _checkout(self, match_id: str) -> threading.Lock:
        with self._mutex:
            entry = self._locks.get(match_id)
            if entry is None:
                entry = self._locks[match_id] = _LocalLock()
            entry.users += 1
            return entry.lock

    def _checkin(self, match_id: str):
        with self._mutex:
            entry = self._locks[match_id]
            entry.users -= 1
            if entry.users == 0:
                del self._locks[match_id]

    def _redis_lock(self, match_id: str):
        # thread_local=False: the lock may be released from another greenlet under eventlet
        return self.redis_client.lock(
            name=f"match:lock:{match_id}",
            timeout=self.redis_lock_ttl,
            blocking_timeout=self.timeout,
            thread_local=False
        )

    @staticmethod
    def _busy(match_id: str) -> MatchBusyError:
        logger.warning(f"🔒 Lock timeout for match {match_id}")
        return MatchBusyError(f"Match {match_id} is busy, please retry")

    @contextmanager
    def hold(self, match_id):
        """Hold the lock for ``match_id`` or raise MatchBusyError after ``timeout`` seconds."""
        match_id = str(match_id)
        if self.distributed:
            with self._hold_redis(match_id):
                yield
        else:
            with self._hold_local(match_id):
                yield

    @contextmanager
    def _hold_local(self, match_id: str):
        lock = self._checkout(match_id)
        try:
            if not lock.acquire(timeout=self.timeout):
                raise self._busy(match_id)
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(match_id)

    @contextmanager
    def _hold_redis(self, match_id: str):
        lock = self._redis_lock(match_id)
        if not lock.acquire(blocking=True):
            raise self._busy(match_id)
        try:
            yield
        finally:
            try:
                lock.release()
            except LockError as e:
                logger.warning(f"🔒 Lock for match {match_id} expired before release: {e}")
