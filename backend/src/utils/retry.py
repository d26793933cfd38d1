"""Bounded retry with a fixed pause between attempts."""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from utils.constants import (
    EXCEL_WRITE_MAX_ATTEMPTS,
    EXCEL_WRITE_RETRY_DELAY_SECONDS,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Run an operation up to ``max_attempts`` times.

    ``sleep`` is injectable so tests can run without real pauses.
    """

    max_attempts: int = EXCEL_WRITE_MAX_ATTEMPTS
    delay_seconds: float = EXCEL_WRITE_RETRY_DELAY_SECONDS
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")

    def run(self, operation: Callable[[], T], description: str = "operation") -> T:
        """Call ``operation`` until it succeeds or attempts run out.

        Returns:
            Whatever ``operation`` returns on its first successful call

        Raises:
            The exception from the last attempt when every attempt fails
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return operation()
            except Exception as e:
                logger.warning(
                    f"{description} attempt {attempt}/{self.max_attempts} failed: {e}"
                )
                if attempt >= self.max_attempts:
                    raise
                logger.info(f"Retrying {description} in {self.delay_seconds:g}s")
                self.sleep(self.delay_seconds)
