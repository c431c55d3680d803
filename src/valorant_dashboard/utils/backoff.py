"""Retry utilities for upstream Riot calls."""
import asyncio
from typing import Any, Callable, Tuple, Type
import httpx
from valorant_dashboard.config.logging import get_logger

logger = get_logger("riot_auth.backoff")

# Transport-level failures only. An HTTP status is an answer, not a failure to retry.
TRANSIENT_ERRORS: Tuple[Type[Exception], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


class ExponentialBackoff:
    """Exponential backoff utility for retrying failed requests."""

    def __init__(self,
                 max_retries: int = 1,
                 base_delay: float = 0.5,
                 max_delay: float = 10.0,
                 exponential_base: float = 2.0):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base

    async def execute(self,
                      func: Callable,
                      *args,
                      retry_on_exceptions: Tuple[Type[Exception], ...] = TRANSIENT_ERRORS,
                      **kwargs) -> Any:
        """Execute function with exponential backoff retry logic."""
        for attempt in range(self.max_retries + 1):
            try:
                result = await func(*args, **kwargs)
                if attempt > 0:
                    logger.info("Request succeeded after retry", attempt=attempt)
                return result

            except retry_on_exceptions as e:
                if attempt == self.max_retries:
                    logger.error("All retry attempts exhausted",
                                 attempts=attempt + 1,
                                 final_error=str(e))
                    raise

                delay = min(
                    self.base_delay * (self.exponential_base ** attempt),
                    self.max_delay
                )

                logger.warning("Request failed, retrying with backoff",
                               attempt=attempt + 1,
                               max_attempts=self.max_retries + 1,
                               delay_seconds=delay,
                               error=str(e))

                await asyncio.sleep(delay)
