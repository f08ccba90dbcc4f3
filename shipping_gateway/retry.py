"""
Fixed-delay retry policy for remote calls.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, TypeVar
from loguru import logger

from shipping_gateway.errors import TransportError, ProtocolError, RetryExhaustedError


T = TypeVar("T")

Sleep = Callable[[float], Awaitable[Any]]


def is_transient(error: BaseException) -> bool:
    """Transport failures and malformed payloads are worth another attempt."""
    return isinstance(error, (TransportError, ProtocolError))


@dataclass
class RetryPolicy:
    """
    Runs an async operation up to max_attempts times.

    The delay is fixed and only applied between attempts. Errors rejected by
    the predicate propagate immediately.
    """

    max_attempts: int = 3
    delay: float = 2.0
    retry_on: Callable[[BaseException], bool] = is_transient
    sleep: Sleep = field(default=asyncio.sleep)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    async def run(
        self,
        operation: Callable[[int], Awaitable[T]],
        description: str = "operation",
        stage: Optional[str] = None,
        log: Any = logger,
    ) -> T:
        """
        Execute operation(attempt) until it succeeds or attempts run out.

        Raises:
            RetryExhaustedError: every attempt failed with a retryable error
        """
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation(attempt)
            except Exception as e:
                if not self.retry_on(e):
                    raise
                last_error = e
                log.warning(
                    f"Attempt {attempt}/{self.max_attempts}: {description} failed: {e}"
                )

            if attempt < self.max_attempts:
                await self.sleep(self.delay)

        raise RetryExhaustedError(
            f"{description} failed after {self.max_attempts} attempts: {last_error}",
            attempts=self.max_attempts,
            last_error=last_error,
            stage=stage if stage is not None else getattr(last_error, "stage", None),
        ) from last_error
