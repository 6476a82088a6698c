"""
Per-match lock registry.
"""
import threading
import time
from unittest.mock import MagicMock

import pytest
from redis.exceptions import LockError

from live_scoring.services.errors import MatchBusyError
from live_scoring.services.locks import MatchLockRegistry


@pytest.mark.unit
class TestLocalLocks:

    def test_waiters_share_the_holders_lock(self):
        registry = MatchLockRegistry(timeout=5)
        held = threading.Event()
        release = threading.Event()
        entered = []

        def holder():
            with registry.hold('m1'):
                held.set()
                release.wait(5)

        def waiter():
            with registry.hold('m1'):
                entered.append(True)

        first = threading.Thread(target=holder)
        first.start()
        held.wait(5)
        second = threading.Thread(target=waiter)
        second.start()
        deadline = time.monotonic() + 5
        while registry._locks['m1'].users < 2 and time.monotonic() < deadline:
            time.sleep(0.01)

        assert entered == []
        assert registry._locks['m1'].users == 2

        release.set()
        first.join(5)
        second.join(5)
        assert entered == [True]
        assert registry._locks == {}

    def test_entries_are_dropped_once_released(self):
        """
        GIVEN a registry used for many distinct match ids
        WHEN every hold has finished, including ones that raised
        THEN no lock entries are left behind
        """
        registry = MatchLockRegistry(timeout=0.05)

        for n in range(500):
            with registry.hold(f'missing-{n}'):
                pass
        with pytest.raises(ValueError):
            with registry.hold('m1'):
                raise ValueError('boom')

        assert registry._locks == {}

    def test_busy_match_times_out(self):
        registry = MatchLockRegistry(timeout=0.05)
        held = threading.Event()
        release = threading.Event()

        def holder():
            with registry.hold('m1'):
                held.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        held.wait(5)
        try:
            with pytest.raises(MatchBusyError):
                with registry.hold('m1'):
                    pass
            # other matches are unaffected
            with registry.hold('m2'):
                pass
        finally:
            release.set()
            thread.join(5)
        assert registry._locks == {}

    def test_lock_is_released_when_body_raises(self):
        registry = MatchLockRegistry(timeout=0.05)

        with pytest.raises(ValueError):
            with registry.hold('m1'):
                raise ValueError('boom')

        with registry.hold('m1'):
            pass


@pytest.mark.unit
class TestRedisLocks:

    def test_redis_lock_is_named_per_match(self):
        client = MagicMock()
        client.lock.return_value.acquire.return_value = True
        registry = MatchLockRegistry(timeout=1.5, redis_client=client)

        with registry.hold(42):
            pass

        client.lock.assert_called_once_with(
            name='match:lock:42', timeout=30, blocking_timeout=1.5, thread_local=False
        )
        client.lock.return_value.release.assert_called_once()

    def test_redis_lock_not_acquired_is_busy(self):
        client = MagicMock()
        client.lock.return_value.acquire.return_value = False
        registry = MatchLockRegistry(redis_client=client)

        with pytest.raises(MatchBusyError):
            with registry.hold('m1'):
                pass

    def test_expired_redis_lock_release_is_tolerated(self):
        client = MagicMock()
        client.lock.return_value.acquire.return_value = True
        client.lock.return_value.release.side_effect = LockError('expired')
        registry = MatchLockRegistry(redis_client=client)

        with registry.hold('m1'):
            pass

    def test_from_config_picks_backend(self):
        assert not MatchLockRegistry.from_config({'MATCH_LOCK_BACKEND': 'memory'}).distributed
        registry = MatchLockRegistry.from_config({
            'MATCH_LOCK_BACKEND': 'redis',
            'REDIS_URL': 'redis://localhost:6379/15',
            'MATCH_LOCK_TIMEOUT_SECONDS': 3
        })
        assert registry.distributed
        assert registry.timeout == 3.0
