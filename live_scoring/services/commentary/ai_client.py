# live_scoring/services/commentary/ai_client.py

"""
AI Commentary Client

Thin synchronous wrapper around an OpenAI-compatible chat completion
endpoint. One attempt per request with a short timeout: commentary that
arrives late is worthless, so nothing here retries.
"""

import logging
import re
from typing import Optional

import openai

from live_scoring.services.commentary.circuit_breaker import CircuitBreaker, CircuitBreakerError

logger = logging.getLogger(__name__)

MAX_COMMENTARY_LENGTH = 280


class AICommentaryError(Exception):
    """Custom exception for AI commentary errors."""
    pass


class AICommentaryClient:
    """
    Generates one line of commentary from a prompt.

    ``generate`` either returns non-empty text or raises AICommentaryError.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = 'gpt-4o-mini',
        base_url: Optional[str] = None,
        timeout: float = 2.5,
        temperature: float = 0.8,
        max_tokens: int = 80,
        client=None
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client
        if self._client is None and api_key:
            self._client = openai.OpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)
        self._circuit_breaker = CircuitBreaker(
            failure_threshold=3,
            recovery_timeout=60,
            expected_exception=AICommentaryError
        )

    @classmethod
    def from_config(cls, config) -> 'AICommentaryClient':
        return cls(
            api_key=config.get('COMMENTARY_API_KEY'),
            model=config.get('COMMENTARY_MODEL', 'gpt-4o-mini'),
            base_url=config.get('COMMENTARY_API_URL'),
            timeout=float(config.get('COMMENTARY_TIMEOUT_SECONDS', 2.5))
        )

    @property
    def enabled(self) -> bool:
        return self._client is not None

    @property
    def circuit_breaker(self) -> CircuitBreaker:
        return self._circuit_breaker

    def generate(self, prompt: str) -> str:
        if not self.enabled:
            raise AICommentaryError("Commentary API key not configured")
        try:
            return self._circuit_breaker.call(self._request, prompt)
        except CircuitBreakerError as e:
            raise AICommentaryError(f"Commentary endpoint unavailable: {e}")

    def _request(self, prompt: str) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                timeout=self.timeout
            )
        except openai.OpenAIError as e:
            raise AICommentaryError(f"Commentary request failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        commentary = clean_commentary(content or '')
        if not commentary:
            raise AICommentaryError("Commentary endpoint returned no text")
        return commentary


def clean_commentary(text: str) -> str:
    """Strip hashtags, wrapping quotes and runs of whitespace."""
    text = re.sub(r'#\w+', '', text)
    text = re.sub(r'\s+', ' ', text).strip().strip('"').strip()
    if len(text) > MAX_COMMENTARY_LENGTH:
        text = text[:MAX_COMMENTARY_LENGTH - 3] + "..."
    return text
