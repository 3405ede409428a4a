"""Test configuration and fixtures."""

import os

import pytest

# Set up test environment variables BEFORE importing app modules
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("RANDOMNESS", "seeded")
os.environ.setdefault("RANDOM_SEED", "1234")

from cryptolab.config import get_settings
from cryptolab.core.arithmetic import is_probable_prime
from cryptolab.core.randomness import SeededRandomness, reset_randomness


@pytest.fixture(autouse=True)
def reset_providers():
    """Reset cached settings and randomness between tests."""
    get_settings.cache_clear()
    reset_randomness()
    yield
    get_settings.cache_clear()
    reset_randomness()


@pytest.fixture
def seeded_rng():
    """Reproducible randomness provider."""
    return SeededRandomness(seed=2024)



@pytest.fixture(scope="session")
def safe_prime_64():
    """Smallest safe prime p = 2q + 1 above 2^63, with a generator g."""
    q = 2**62 + 1
    while not (is_probable_prime(q) and is_probable_prime(2 * q + 1)):
        q += 2
    p = 2 * q + 1
    g = next(g for g in range(2, 1000) if pow(g, q, p) == p - 1)
    return p, g
