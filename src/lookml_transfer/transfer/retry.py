"""Bounded retry with a fixed backoff schedule."""

import time
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple, Type, TypeVar

from loguru import logger

T = TypeVar('T')


class WriteMode(str, Enum):
    """HTTP method used for a create-or-update call."""

    CREATE = 'POST'
    UPDATE = 'PUT'

    @classmethod
    def for_attempt(cls, attempt: int) -> 'WriteMode':
        """First attempt creates, every retry updates."""
        return cls.CREATE if attempt == 0 else cls.UPDATE


class RetryPolicy:
    """Retry an action a fixed number of times with scheduled delays."""

    def __init__(
        self,
        max_attempts: int = 3,
        delays: Sequence[float] = (20.0, 60.0, 120.0),
        retry_on: Tuple[Type[Exception], ...] = (Exception,),
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize retry policy.

        Args:
            max_attempts: Total attempts, including the first one
            delays: Seconds to wait after the failure of attempt N
            retry_on: Exception types that trigger a retry
            sleep: Blocking sleep function
        """
        if max_attempts <= 0:
            raise ValueError('max_attempts must be positive')
        if len(delays) < max_attempts - 1:
            raise ValueError(f'need at least {max_attempts - 1} delays')

        self.max_attempts = max_attempts
        self.delays = list(delays)
        self.retry_on = retry_on
        self.sleep = sleep

    def run(
        self,
        action: Callable[[int], T],
        on_retry: Optional[Callable[[int, Exception, float], None]] = None,
    ) -> T:
        """Call ``action(attempt)`` until it succeeds or attempts run out.

        Args:
            action: Callable receiving the zero-based attempt index
            on_retry: Called with (next attempt, error, delay) before sleeping

        Returns:
            Result of the first successful attempt

        Raises:
            The last error once every attempt has failed
        """
        for attempt in range(self.max_attempts):
            try:
                return action(attempt)
            except self.retry_on as e:
                if attempt + 1 >= self.max_attempts:
                    logger.warning(
                        f'Giving up after {self.max_attempts} attempts: {e}'
                    )
                    raise

                delay = self.delays[attempt]
                logger.warning(
                    f'Attempt {attempt + 1}/{self.max_attempts} failed: {e}. '
                    f'Retrying in {delay:g}s'
                )
                if on_retry is not None:
                    on_retry(attempt + 1, e, delay)
                self.sleep(delay)

        # max_attempts is validated positive, so the loop always returns or raises
        raise RuntimeError('retry loop exited without a result')
