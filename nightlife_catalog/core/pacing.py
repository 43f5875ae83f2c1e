"""Fixed-delay pacing between outbound SerpAPI calls."""

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class Pacer:
    """Sleeps a fixed amount after each call. ``sleep`` is swappable for tests."""

    def __init__(self, delay_seconds: float, sleep: Callable[[float], None] = time.sleep) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self.waits = 0

    def wait(self) -> None:
        self.waits += 1
        if self.delay_seconds:
            self._sleep(self.delay_seconds)
