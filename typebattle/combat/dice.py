"""
Random source

Every probability draw in the engine goes through ``RandomSource.next_fraction``
so that tests can replay an exact sequence of values.
"""
import logging
import random
from typing import Iterable, List, Optional, Protocol, runtime_checkable

from .errors import RandomSourceExhausted

logger = logging.getLogger(__name__)


@runtime_checkable
class RandomSource(Protocol):
    """Anything that can produce a float in [0, 1)."""

    def next_fraction(self) -> float:
        ...


class DefaultRandomSource:
    """Production random source backed by ``random.Random``."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random(seed)

    def next_fraction(self) -> float:
        return self._random.random()

    def reseed(self, seed: int) -> None:
        """Restart the sequence from a new seed."""
        self.seed = seed
        self._random = random.Random(seed)


class ScriptedRandomSource:
    """
    Random source that replays a fixed list of values

    Args:
        values: fractions in [0, 1) returned in order

    Raises:
        RandomSourceExhausted: when more draws are requested than scripted
    """

    def __init__(self, values: Iterable[float]):
        self._values: List[float] = list(values)
        for value in self._values:
            if not 0.0 <= value < 1.0:
                raise ValueError(f"Scripted value out of range [0, 1): {value}")
        self._index = 0

    @property
    def draws(self) -> int:
        """Number of values consumed so far"""
        return self._index

    @property
    def remaining(self) -> int:
        return len(self._values) - self._index

    def next_fraction(self) -> float:
        if self._index >= len(self._values):
            raise RandomSourceExhausted(
                f"Scripted random source exhausted after {self._index} draws"
            )
        value = self._values[self._index]
        self._index += 1
        return value


def roll_percent(rng: RandomSource, rate: float) -> bool:
    """
    Draw once and compare against a percentage

    Args:
        rng: random source
        rate: success chance in percent (0-100)

    Returns:
        bool: True when ``fraction * 100 < rate``
    """
    roll = rng.next_fraction() * 100
    hit = roll < rate
    logger.debug("roll %.2f vs %.2f%% -> %s", roll, rate, hit)
    return hit


def choose_index(rng: RandomSource, count: int) -> int:
    """Pick an index in [0, count) with a single draw."""
    if count <= 0:
        raise ValueError("count must be >= 1")
    return min(int(rng.next_fraction() * count), count - 1)


# Shared default source for callers that do not inject one
_default_source: Optional[DefaultRandomSource] = None


def default_random_source() -> DefaultRandomSource:
    """Return the lazily created process-wide random source."""
    global _default_source
    if _default_source is None:
        from typebattle.config import settings

        _default_source = DefaultRandomSource(settings.rng_seed)
    return _default_source
