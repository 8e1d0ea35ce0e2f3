"""
Retry Executor

Bounded retry wrapper for fallible async operations (LLM calls).
Supports:
- Interchangeable backoff policies (exponential, linear)
- Classification of transient failures worth retrying
- Optional fail-fast on non-retryable errors
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import httpx

from amountex.exceptions import ConfigurationError, MaxRetriesExceededError

logger = logging.getLogger(__name__)

T = TypeVar('T')

RETRYABLE_MARKERS = (
    '503',
    'service unavailable',
    'timeout',
    'timed out',
    'network',
    'econnreset',
    'etimedout',
    'connection reset',
    'connection aborted',
)


def is_retryable_error(error: BaseException) -> bool:
    """Check whether an error describes a transient condition"""
    if isinstance(error, (asyncio.TimeoutError, ConnectionError, httpx.TransportError)):
        return True
    description = f"{type(error).__name__} {error}".lower()
    return any(marker in description for marker in RETRYABLE_MARKERS)


class BackoffPolicy(ABC):
    """Computes the delay before the next attempt"""

    name = 'base'
    # Whether to wait before retrying a failure that is not transient
    delays_non_retryable = False

    @abstractmethod
    def delay_for(self, attempt: int) -> float:
        """
        Delay in seconds after a failed attempt.

        Args:
            attempt: 1-indexed number of the attempt that just failed
        """
        raise NotImplementedError


class ExponentialBackoff(BackoffPolicy):
    """Waits 2**attempt seconds: 2s, 4s, 8s, ..."""

    name = 'exponential'

    def __init__(self, base: float = 2.0, max_delay: Optional[float] = None):
        self.base = base
        self.max_delay = max_delay

    def delay_for(self, attempt: int) -> float:
        delay = float(self.base ** attempt)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay


class LinearBackoff(BackoffPolicy):
    """Waits a fixed delay between attempts"""

    name = 'linear'
    delays_non_retryable = True

    def __init__(self, delay: float = 1.0):
        self.delay = delay

    def delay_for(self, attempt: int) -> float:
        return float(self.delay)


class RetryExecutor:
    """
    Executes an async operation up to ``max_attempts`` times.

    Attempts are sequential. Retryable failures wait the policy delay.
    Non-retryable failures wait only under a policy that delays every
    retry (linear), and are raised at once when
    ``fail_fast_on_non_retryable`` is set.

    Usage:
        executor = RetryExecutor(ExponentialBackoff())
        text = await executor.execute(lambda: service.generate_completion(prompt), 3)
    """

    def __init__(
        self,
        policy: Optional[BackoffPolicy] = None,
        fail_fast_on_non_retryable: bool = False,
        retryable: Callable[[BaseException], bool] = is_retryable_error
    ):
        self.policy = policy or ExponentialBackoff()
        self.fail_fast_on_non_retryable = fail_fast_on_non_retryable
        self.retryable = retryable

    async def execute(self, operation: Callable[[], Awaitable[T]], max_attempts: int = 3) -> T:
        """
        Run ``operation`` with retries.

        Args:
            operation: Zero-argument callable returning an awaitable
            max_attempts: Upper bound on attempts (>= 1)

        Returns:
            The operation's result

        Raises:
            The last error once attempts are exhausted
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        last_error: Optional[BaseException] = None

        for attempt in range(1, max_attempts + 1):
            try:
                logger.debug(f"🔄 Attempt {attempt}/{max_attempts}")
                return await operation()
            except Exception as e:
                last_error = e
                logger.warning(f"❌ Attempt {attempt}/{max_attempts} failed: {e}")

                if attempt == max_attempts:
                    break

                retryable = self.retryable(e)
                if not retryable and self.fail_fast_on_non_retryable:
                    logger.warning(f"Non-retryable error, giving up: {e}")
                    raise

                if retryable or self.policy.delays_non_retryable:
                    delay = self.policy.delay_for(attempt)
                    logger.info(f"⏳ Retrying in {delay:g} seconds...")
                    await asyncio.sleep(delay)

        if last_error is not None:
            raise last_error
        raise MaxRetriesExceededError(f"Max retries exceeded ({max_attempts})")


POLICIES = {
    'exponential': ExponentialBackoff,
    'linear': LinearBackoff,
}


def create_retry_executor(config: Optional[Dict[str, Any]] = None) -> RetryExecutor:
    """
    Build a RetryExecutor from the ``retry`` configuration section.

    Args:
        config: Dictionary with ``policy``, ``linear_delay_seconds``,
            ``max_delay_seconds`` and ``fail_fast_on_non_retryable``
    """
    config = config or {}
    policy_name = config.get('policy', 'exponential')

    if policy_name not in POLICIES:
        raise ConfigurationError(
            f"Unknown retry policy: {policy_name}. Available: {', '.join(POLICIES)}"
        )

    if policy_name == 'linear':
        policy = LinearBackoff(delay=float(config.get('linear_delay_seconds', 1.0)))
    else:
        max_delay = config.get('max_delay_seconds')
        policy = ExponentialBackoff(max_delay=float(max_delay) if max_delay is not None else None)

    return RetryExecutor(
        policy=policy,
        fail_fast_on_non_retryable=bool(config.get('fail_fast_on_non_retryable', False))
    )
