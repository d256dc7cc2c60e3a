# src/triunity/telemetry/clock.py
import random
import time
from datetime import datetime, timezone
from typing import Optional

# Anything with random(), randint(), uniform(), choice() and randbytes()
RandomSource = random.Random


class Clock:
    """Source of wall-clock time in epoch milliseconds"""

    def now_ms(self) -> int:
        raise NotImplementedError


class SystemClock(Clock):
    def now_ms(self) -> int:
        return int(time.time() * 1000)


class FixedClock(Clock):
    """Clock frozen at a given instant; advance() moves it forward"""

    def __init__(self, now_ms: int):
        self._now_ms = int(now_ms)

    def now_ms(self) -> int:
        return self._now_ms

    def advance(self, ms: int) -> None:
        self._now_ms += int(ms)


def make_random_source(seed: Optional[int] = None) -> RandomSource:
    """Entropy-backed RNG in production, reproducible RNG when seeded"""
    if seed is None:
        return random.SystemRandom()
    return random.Random(seed)


def utc_datetime(now_ms: float) -> datetime:
    return datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc)


def iso_timestamp(now_ms: float) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix"""
    return utc_datetime(now_ms).isoformat(timespec="milliseconds").replace("+00:00", "Z")
