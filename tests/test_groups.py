"""Tests for group parameter generation."""

import pytest

from cryptolab.core.arithmetic import is_probable_prime
from cryptolab.core.commitment_engine import PedersenEngine
from cryptolab.core.errors import InvalidParameterError
from cryptolab.core.groups import (
    DEMO_DL_GROUP,
    derive_independent_generator,
    generate_dl_group,
    generate_paillier_primes,
)


class TestIndependentGenerator:
    """Tests for hash-derived Pedersen generators."""

    def test_deterministic(self):
        """Test the same seed gives the same h."""
        assert derive_independent_generator(23, 5) == derive_independent_generator(23, 5)

    def test_quadratic_residue(self):
        """Test h lands in the subgroup of squares."""
        p = 2**127 - 1
        h = derive_independent_generator(p, 3)
        assert 1 < h < p
        assert pow(h, (p - 1) // 2, p) == 1

    def test_avoids_trivial_values(self):
        """Test h is never 0, 1 or g."""
        for seed in (b"a", b"b", b"c", b"d", b"e"):
            h = derive_independent_generator(23, 5, seed)
            assert h not in (0, 1, 5)
            assert 1 < h < 23

    def test_seed_changes_result(self):
        """Test different seeds give different generators in a large group."""
        p = 2**127 - 1
        assert derive_independent_generator(p, 3, b"one") != derive_independent_generator(p, 3, b"two")

    def test_small_modulus(self):
        """Test p below 7 raises."""
        with pytest.raises(InvalidParameterError):
            derive_independent_generator(5, 2)

    def test_composite_modulus(self):
        """Test a composite p raises."""
        with pytest.raises(InvalidParameterError):
            derive_independent_generator(21, 2)


class TestGeneration:
    """Tests for safe-prime and Paillier prime generation."""

    def test_demo_group(self):
        """Test the demo group constants."""
        assert DEMO_DL_GROUP.p == 23
        assert DEMO_DL_GROUP.order == 22

    def test_dl_group_safe_prime(self):
        """Test a 512-bit safe-prime group."""
        group = generate_dl_group(512)

        assert group.p.bit_length() == 512
        assert group.g == 2
        assert is_probable_prime(group.p)
        assert is_probable_prime((group.p - 1) // 2)

    def test_dl_group_too_small(self):
        """Test key sizes below 512 raise."""
        with pytest.raises(InvalidParameterError):
            generate_dl_group(256)

    def test_paillier_primes(self):
        """Test two distinct primes with a 1024-bit product."""
        p, q = generate_paillier_primes(1024)

        assert p != q
        assert is_probable_prime(p) and is_probable_prime(q)
        assert (p * q).bit_length() == 1024

    def test_paillier_primes_too_small(self):
        """Test key sizes below 1024 raise."""
        with pytest.raises(InvalidParameterError):
            generate_paillier_primes(512)

    def test_pedersen_setup_generated(self, seeded_rng):
        """Test Pedersen setup over a generated group."""
        engine = PedersenEngine(rng=seeded_rng)
        params = engine.setup(512)
        engine.validate_params(params)

        result = engine.commit(params, 2**100)
        assert engine.open(params, result.commitment, 2**100, result.randomness)
