"""
Jittered request pacing.
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable

JITTER_RATIO = 0.5

Sleeper = Callable[[float], None]


class JitteredPacer:
    """
    Sleeps a base delay with +/-50% jitter drawn independently per request.

    All waits of a run (settle delays, bot-challenge recovery, pacing) go
    through `sleep`, so tests can swap in a recorder.
    """

    def __init__(
        self,
        *,
        sleep: Sleeper = time.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self._sleep = sleep
        self._rng = rng or random.Random()

    def jittered_seconds(self, base_ms: int) -> float:
        base_seconds = max(0, base_ms) / 1000.0
        jitter = base_seconds * JITTER_RATIO
        return base_seconds - jitter + self._rng.random() * jitter * 2

    def wait(self, base_ms: int) -> float:
        """
        Sleep before the next request; returns the delay actually used.
        """

        delay = self.jittered_seconds(base_ms)
        if delay > 0:
            self._sleep(delay)
        return delay

    def pause(self, seconds: float) -> None:
        """
        Sleep a fixed duration (settle delays, recovery waits).
        """

        if seconds > 0:
            self._sleep(seconds)
