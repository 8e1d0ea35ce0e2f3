"""
Job utilities for AmountEx

Provides the bounded retry wrapper used around external model calls.
"""

from .retry import (
    RetryExecutor,
    BackoffPolicy,
    ExponentialBackoff,
    LinearBackoff,
    is_retryable_error,
    create_retry_executor,
)

__all__ = [
    'RetryExecutor',
    'BackoffPolicy',
    'ExponentialBackoff',
    'LinearBackoff',
    'is_retryable_error',
    'create_retry_executor',
]
