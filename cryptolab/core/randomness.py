"""Randomness providers for protocol sampling.

Every ephemeral value the engines draw (polynomial coefficients, Paillier
blinding factors, ElGamal and Schnorr nonces, Pedersen randomness) comes
from a RandomnessProvider, so demo and test runs can replay fixed values
while normal runs use the operating system CSPRNG.

Usage:
    rng = SecureRandomness()
    r = rng.randint(1, p - 2)
"""

import random
import secrets
import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Iterable

from cryptolab.core.errors import InvalidParameterError


class RandomnessProvider(ABC):
    """Source of uniformly distributed integers."""

    name: str = "abstract"

    @abstractmethod
    def _draw(self, low: int, high: int) -> int:
        """Draw from [low, high]; bounds are already validated."""

    def randint(self, low: int, high: int) -> int:
        """Return a uniform integer in the inclusive range [low, high].

        Raises:
            InvalidParameterError: If the range is empty
        """
        if low > high:
            raise InvalidParameterError(f"Empty sampling range [{low}, {high}]")
        return self._draw(low, high)

    def sample(self, values: range) -> int:
        """Return a uniform element of a step-1 range object."""
        if values.step != 1:
            raise InvalidParameterError("Only step-1 ranges can be sampled")
        return self.randint(values.start, values.stop - 1)


class SecureRandomness(RandomnessProvider):
    """CSPRNG-backed provider (``secrets`` module)."""

    name = "secure"

    def _draw(self, low: int, high: int) -> int:
        return low + secrets.randbelow(high - low + 1)


class SeededRandomness(RandomnessProvider):
    """Reproducible provider for tests and demos.

    Draws come from a private ``random.Random`` so they never disturb or
    depend on the global generator. Not suitable for real keys.
    """

    name = "seeded"

    def __init__(self, seed: int = 0):
        self._random = random.Random(seed)
        self._lock = threading.Lock()

    def _draw(self, low: int, high: int) -> int:
        with self._lock:
            return self._random.randint(low, high)


class FixedRandomness(RandomnessProvider):
    """Replays a fixed sequence of values, cycling when exhausted.

    Reproduces walkthroughs that use constants such as nonce ``r = 3`` and
    challenge ``c = 2``.
    """

    name = "fixed"

    def __init__(self, values: Iterable[int]):
        self._values = list(values)
        if not self._values:
            raise InvalidParameterError("FixedRandomness needs at least one value")
        self._queue: deque[int] = deque()
        self._lock = threading.Lock()

    def _draw(self, low: int, high: int) -> int:
        with self._lock:
            if not self._queue:
                self._queue.extend(self._values)
            value = self._queue.popleft()
        if not low <= value <= high:
            raise InvalidParameterError(
                f"Fixed value {value} outside requested range [{low}, {high}]"
            )
        return value


_default_provider: RandomnessProvider | None = None


def get_randomness() -> RandomnessProvider:
    """Get the process-wide provider selected by settings."""
    global _default_provider
    if _default_provider is None:
        from cryptolab.config import get_settings

        settings = get_settings()
        if settings.randomness == "seeded":
            _default_provider = SeededRandomness(settings.random_seed)
        else:
            _default_provider = SecureRandomness()
    return _default_provider


def reset_randomness() -> None:
    """Forget the cached provider (settings changed, or between tests)."""
    global _default_provider
    _default_provider = None
