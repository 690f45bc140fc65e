"""Fixed-attempt retry policy for attachment downloads."""

import asyncio
from typing import Awaitable, Callable, FrozenSet, Iterable, Optional, TypeVar

from attachment_inliner.config.models import RetryConfig
from attachment_inliner.exceptions import FetchError
from attachment_inliner.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 4
DEFAULT_DELAY = 5.0
# Internal server errors and unprocessable requests are not transient
DEFAULT_FATAL_STATUS_CODES = frozenset({500, 422})


class RetryPolicy:
    """Retries an operation that fails with retryable HTTP statuses."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        delay: float = DEFAULT_DELAY,
        fatal_status_codes: Iterable[int] = DEFAULT_FATAL_STATUS_CODES,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.delay = delay
        self.fatal_status_codes: FrozenSet[int] = frozenset(fatal_status_codes)
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_config(
        cls,
        config: RetryConfig,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> "RetryPolicy":
        """Build a policy from the ``[retry]`` configuration section."""
        return cls(
            max_attempts=config.max_attempts,
            delay=config.delay,
            fatal_status_codes=config.fatal_status_codes,
            sleep=sleep,
        )

    def is_retryable(self, error: FetchError) -> bool:
        """Whether a download that failed with this status may be attempted again."""
        return error.status_code not in self.fatal_status_codes

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``operation`` until it succeeds or the attempts are used up.

        Only ``FetchError`` with a retryable status is retried; every other
        exception, and the failure of the last attempt, is raised as is.

        Args:
            operation: Zero-argument coroutine function performing one attempt.

        Returns:
            The result of the first successful attempt.
        """
        attempt = 1
        while True:
            try:
                return await operation()
            except FetchError as err:
                if not self.is_retryable(err):
                    logger.warning(
                        "download_failed_fatal",
                        url=err.url,
                        status_code=err.status_code,
                        attempt=attempt,
                    )
                    raise
                if attempt >= self.max_attempts:
                    logger.warning(
                        "download_retries_exhausted",
                        url=err.url,
                        status_code=err.status_code,
                        attempts=attempt,
                    )
                    raise
                logger.info(
                    "download_retry_scheduled",
                    url=err.url,
                    status_code=err.status_code,
                    attempt=attempt,
                    delay=self.delay,
                )
            await self._sleep(self.delay)
            attempt += 1
