# live_scoring/services/commentary/__init__.py

"""
Commentary Package

Best-effort AI commentary: the OpenAI-compatible client, its circuit breaker
and the augmenter that schedules it after each accepted event.
"""

from .ai_client import AICommentaryClient, AICommentaryError
from .augmenter import CommentaryAugmenter, build_prompt, match_snapshot
from .circuit_breaker import CircuitBreaker, CircuitBreakerError, CircuitState

__all__ = [
    'AICommentaryClient', 'AICommentaryError',
    'CommentaryAugmenter', 'build_prompt', 'match_snapshot',
    'CircuitBreaker', 'CircuitBreakerError', 'CircuitState',
]
