"""
Bounded retry for transient LinkedIn responses.

LinkedIn sometimes answers with a status that only means "not ready yet"
(a long video still being validated at finalize, a freshly created post
not yet visible to the comments endpoint). Those responses are retried a
fixed number of times with a linearly growing delay; everything else is
returned to the caller on the first attempt.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

import httpx

Sleep = Callable[[float], Awaitable[None]]


def backoff_delay_ms(base_delay_ms: float, attempt: int) -> float:
    """
    Delay before retry number ``attempt`` (1-based).

    Grows linearly with the attempt number: base * attempt + 1 ms.
    """
    return base_delay_ms * attempt + 1


@dataclass
class RetryPolicy:
    """
    Retry budget shared by every tolerated transient condition.

    Attributes:
        retries: Maximum number of retries after the first attempt
        no_retries: Disable retrying entirely
        base_delay_ms: Backoff base in milliseconds
        sleep: Coroutine used to wait between attempts
        logger: Logger for retry warnings and exhaustion errors
    """

    retries: int = 3
    no_retries: bool = False
    base_delay_ms: float = 500
    sleep: Sleep = field(default=asyncio.sleep, repr=False)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__), repr=False)

    @property
    def budget(self) -> int:
        return 0 if self.no_retries else max(self.retries, 0)

    async def run(
        self,
        send: Callable[[], Awaitable[httpx.Response]],
        is_transient: Callable[[httpx.Response], bool],
        description: str = "request",
        on_retry: Optional[Callable[[int, int], None]] = None,
        explain: Optional[Callable[[httpx.Response], str]] = None,
    ) -> httpx.Response:
        """
        Send until the response is not transient or the budget is spent.

        Args:
            send: Coroutine factory issuing one attempt
            is_transient: Whether a response should be retried
            description: Label used in log messages
            on_retry: Called with (attempt, remaining) before each retry delay
            explain: Describes why a transient response is retried
                (defaults to "returned <status>")

        Returns:
            The first non-transient response, or the last transient one
            once the budget is exhausted
        """
        attempt = 0
        while True:
            response = await send()
            if not is_transient(response):
                return response

            remaining = self.budget - attempt
            if remaining <= 0:
                if self.budget:
                    self.logger.error(
                        f"{description} still failing ({response.status_code}) "
                        f"after {self.budget} retries"
                    )
                return response

            attempt += 1
            delay_ms = backoff_delay_ms(self.base_delay_ms, attempt)
            reason = explain(response) if explain else f"returned {response.status_code}"
            self.logger.warning(
                f"{description} {reason}, "
                f"retrying in {delay_ms:.0f}ms ({attempt}/{self.budget})"
            )
            if on_retry:
                on_retry(attempt, remaining - 1)
            await self.sleep(delay_ms / 1000)
