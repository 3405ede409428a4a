"""Tests for Paillier and ElGamal homomorphic engines."""

from dataclasses import fields

import pytest

from cryptolab.core.errors import (
    DivisionByZeroError,
    InvalidParameterError,
    OutOfRangeError,
    TypeMismatchError,
)
from cryptolab.core.homomorphic_engine import (
    ElGamalCiphertext,
    ElGamalEngine,
    ElGamalPrivateKey,
    HomomorphicScheme,
    PaillierCiphertext,
    PaillierEngine,
    elgamal_engine,
    paillier_engine,
)
from cryptolab.core.randomness import FixedRandomness, SeededRandomness


@pytest.fixture
def paillier(seeded_rng):
    """Create a Paillier engine with reproducible blinding."""
    return PaillierEngine(rng=seeded_rng)


@pytest.fixture
def paillier_keys(paillier):
    """Demo key pair n = 61 * 53."""
    return paillier.generate_keys(61, 53)


@pytest.fixture
def elgamal(seeded_rng):
    """Create an ElGamal engine with reproducible nonces."""
    return ElGamalEngine(rng=seeded_rng)


@pytest.fixture
def elgamal_keys(elgamal):
    """Demo key pair over p = 23, g = 5 with x = 6."""
    return elgamal.generate_keys(23, 5, x=6)


class TestPaillierKeys:
    """Tests for Paillier key generation."""

    def test_demo_keys(self, paillier_keys):
        """Test key material for p = 61, q = 53."""
        public, private = paillier_keys.public_key, paillier_keys.private_key

        assert public.n == 3233
        assert public.g == 3234
        assert public.n_squared == 3233 * 3233
        assert private.lam == 780
        assert private.mu * 780 % 3233 == 1

    def test_equal_primes_rejected(self, paillier):
        """Test p == q raises."""
        with pytest.raises(InvalidParameterError):
            paillier.generate_keys(61, 61)

    def test_composite_rejected(self, paillier):
        """Test non-prime factors raise."""
        with pytest.raises(InvalidParameterError):
            paillier.generate_keys(4, 53)

    def test_gcd_condition(self, paillier):
        """Test gcd(pq, (p-1)(q-1)) != 1 raises."""
        # 3 divides 7 - 1
        with pytest.raises(InvalidParameterError):
            paillier.generate_keys(3, 7)

    def test_keys_immutable(self, paillier_keys):
        """Test keys are frozen."""
        with pytest.raises(AttributeError):
            paillier_keys.public_key.n = 77


class TestPaillierOperations:
    """Tests for Paillier encryption and homomorphic operations."""

    def test_encrypt_decrypt(self, paillier, paillier_keys):
        """Test round trip with a fixed blinding factor."""
        c = paillier.encrypt(paillier_keys.public_key, 10, r=17)

        assert c.n == 3233
        assert 0 < c.value < 3233 * 3233
        assert paillier.decrypt(paillier_keys.private_key, c) == 10

    def test_probabilistic(self, paillier, paillier_keys):
        """Test different blinding factors give different ciphertexts."""
        a = paillier.encrypt(paillier_keys.public_key, 10, r=17)
        b = paillier.encrypt(paillier_keys.public_key, 10, r=19)
        assert a != b

    def test_add(self, paillier, paillier_keys):
        """Test Enc(10) * Enc(20) decrypts to 30."""
        pk, sk = paillier_keys.public_key, paillier_keys.private_key
        combined = paillier.combine(pk, paillier.encrypt(pk, 10), paillier.encrypt(pk, 20))
        assert paillier.decrypt(sk, combined) == 30

    def test_add_wraps_modulo_n(self, paillier, paillier_keys):
        """Test sums reduce modulo n."""
        pk, sk = paillier_keys.public_key, paillier_keys.private_key
        combined = paillier.combine(pk, paillier.encrypt(pk, 3000), paillier.encrypt(pk, 300))
        assert paillier.decrypt(sk, combined) == 67

    def test_add_random_pairs(self, paillier, paillier_keys):
        """Test additive homomorphism on random plaintexts."""
        pk, sk = paillier_keys.public_key, paillier_keys.private_key
        values = SeededRandomness(seed=11)

        for _ in range(50):
            m1, m2 = values.randint(0, 3232), values.randint(0, 3232)
            combined = paillier.combine(pk, paillier.encrypt(pk, m1), paillier.encrypt(pk, m2))
            assert paillier.decrypt(sk, combined) == (m1 + m2) % 3233

    def test_scale(self, paillier, paillier_keys):
        """Test Enc(7)^5 decrypts to 35."""
        pk, sk = paillier_keys.public_key, paillier_keys.private_key
        scaled = paillier.scale(pk, paillier.encrypt(pk, 7), 5)
        assert paillier.decrypt(sk, scaled) == 35

    def test_scale_negative(self, paillier, paillier_keys):
        """Test a negative scalar negates modulo n."""
        pk, sk = paillier_keys.public_key, paillier_keys.private_key
        scaled = paillier.scale(pk, paillier.encrypt(pk, 5), -1)
        assert paillier.decrypt(sk, scaled) == 3228

    def test_combine_many(self, paillier, paillier_keys):
        """Test folding a list of ciphertexts."""
        pk, sk = paillier_keys.public_key, paillier_keys.private_key
        cts = [paillier.encrypt(pk, v) for v in (1, 2, 3, 4)]
        assert paillier.decrypt(sk, paillier.combine_many(pk, cts)) == 10

    def test_combine_many_empty(self, paillier, paillier_keys):
        """Test an empty list raises."""
        with pytest.raises(InvalidParameterError):
            paillier.combine_many(paillier_keys.public_key, [])

    @pytest.mark.parametrize("message", [3233, 5000, -1])
    def test_message_out_of_range(self, paillier, paillier_keys, message):
        """Test plaintexts outside [0, n) raise."""
        with pytest.raises(OutOfRangeError):
            paillier.encrypt(paillier_keys.public_key, message)

    @pytest.mark.parametrize("r", [0, 61, 53, 3233])
    def test_invalid_blinding(self, paillier, paillier_keys, r):
        """Test blinding factors that are not units raise."""
        with pytest.raises(InvalidParameterError):
            paillier.encrypt(paillier_keys.public_key, 10, r=r)

    def test_sampled_blinding_skips_non_units(self, paillier_keys):
        """Test sampled r that shares a factor with n is redrawn."""
        engine = PaillierEngine(rng=FixedRandomness([61, 17]))
        c = engine.encrypt(paillier_keys.public_key, 10)
        assert c == engine.encrypt(paillier_keys.public_key, 10, r=17)

    def test_ciphertext_outside_ring(self, paillier, paillier_keys):
        """Test a zero ciphertext raises."""
        with pytest.raises(InvalidParameterError):
            paillier.decrypt(paillier_keys.private_key, PaillierCiphertext(value=0, n=3233))

    def test_different_modulus(self, paillier, paillier_keys):
        """Test ciphertexts under another key are refused."""
        other = paillier.generate_keys(67, 71)
        foreign = paillier.encrypt(other.public_key, 5)
        local = paillier.encrypt(paillier_keys.public_key, 5)

        with pytest.raises(TypeMismatchError):
            paillier.combine(paillier_keys.public_key, local, foreign)
        with pytest.raises(TypeMismatchError):
            paillier.decrypt(paillier_keys.private_key, foreign)

    def test_mixed_scheme(self, paillier, paillier_keys):
        """Test an ElGamal ciphertext is refused."""
        local = paillier.encrypt(paillier_keys.public_key, 5)
        with pytest.raises(TypeMismatchError):
            paillier.combine(paillier_keys.public_key, local, ElGamalCiphertext(c1=2, c2=8, p=23))

    def test_type_mismatch_is_type_error(self, paillier, paillier_keys):
        """Test the mismatch error also reads as a TypeError."""
        with pytest.raises(TypeError):
            paillier.scale(paillier_keys.public_key, ElGamalCiphertext(c1=2, c2=8, p=23), 2)

    def test_generated_keys(self, paillier):
        """Test a 1024-bit modulus from fresh primes."""
        keys = paillier.generate_random_keys(1024)
        pk, sk = keys.public_key, keys.private_key
        m1, m2 = 2**200 + 7, 2**300 + 11

        assert pk.n.bit_length() == 1024
        combined = paillier.combine(pk, paillier.encrypt(pk, m1), paillier.encrypt(pk, m2))
        assert paillier.decrypt(sk, combined) == m1 + m2

    def test_demo(self, paillier, paillier_keys):
        """Test the additive walkthrough."""
        result = paillier.demo(paillier_keys, [10, 20, 30])

        assert result.scheme == HomomorphicScheme.PAILLIER
        assert result.result == 60
        assert len(result.ciphertexts) == 3


class TestElGamal:
    """Tests for ElGamal encryption and homomorphic multiplication."""

    def test_demo_keys(self, elgamal_keys):
        """Test y = 5^6 mod 23 = 8."""
        assert elgamal_keys.public_key.y == 8
        assert elgamal_keys.private_key.x == 6

    def test_encrypt_known_nonce(self, elgamal, elgamal_keys):
        """Test (c1, c2) for m = 3, k = 2."""
        c = elgamal.encrypt(elgamal_keys.public_key, 3, k=2)

        assert (c.c1, c.c2) == (2, 8)
        assert elgamal.decrypt(elgamal_keys.private_key, c) == 3

    def test_multiply(self, elgamal, elgamal_keys):
        """Test Enc(3) * Enc(4) decrypts to 12."""
        pk, sk = elgamal_keys.public_key, elgamal_keys.private_key
        combined = elgamal.combine(pk, elgamal.encrypt(pk, 3), elgamal.encrypt(pk, 4))
        assert elgamal.decrypt(sk, combined) == 12

    def test_multiply_wraps(self, elgamal, elgamal_keys):
        """Test products reduce modulo p."""
        pk, sk = elgamal_keys.public_key, elgamal_keys.private_key
        combined = elgamal.combine(pk, elgamal.encrypt(pk, 5), elgamal.encrypt(pk, 7))
        assert elgamal.decrypt(sk, combined) == 12

    def test_multiply_all_pairs(self, elgamal, elgamal_keys):
        """Test multiplicative homomorphism on every pair of units."""
        pk, sk = elgamal_keys.public_key, elgamal_keys.private_key
        for m1 in range(1, 23):
            for m2 in (1, 2, 11, 22):
                combined = elgamal.combine(pk, elgamal.encrypt(pk, m1), elgamal.encrypt(pk, m2))
                assert elgamal.decrypt(sk, combined) == m1 * m2 % 23

    def test_zero_message(self, elgamal, elgamal_keys):
        """Test m = 0 encrypts and decrypts."""
        c = elgamal.encrypt(elgamal_keys.public_key, 0)
        assert elgamal.decrypt(elgamal_keys.private_key, c) == 0

    def test_combine_many(self, elgamal, elgamal_keys):
        """Test folding a list of ciphertexts."""
        pk, sk = elgamal_keys.public_key, elgamal_keys.private_key
        cts = [elgamal.encrypt(pk, v) for v in (2, 3, 3)]
        assert elgamal.decrypt(sk, elgamal.combine_many(pk, cts)) == 18

    def test_large_group(self, seeded_rng):
        """Test a 127-bit group."""
        engine = ElGamalEngine(rng=seeded_rng)
        keys = engine.generate_keys(2**127 - 1, 3)
        pk, sk = keys.public_key, keys.private_key

        combined = engine.combine(pk, engine.encrypt(pk, 2**60), engine.encrypt(pk, 2**50))
        assert engine.decrypt(sk, combined) == 2**110

    def test_non_generator(self, elgamal):
        """Test g = 2 (order 11 mod 23) raises."""
        with pytest.raises(InvalidParameterError):
            elgamal.generate_keys(23, 2)

    def test_composite_modulus(self, elgamal):
        """Test a composite p raises."""
        with pytest.raises(InvalidParameterError):
            elgamal.generate_keys(21, 2)

    @pytest.mark.parametrize("x", [0, 22, 23])
    def test_private_exponent_range(self, elgamal, x):
        """Test x outside [1, p-2] raises."""
        with pytest.raises(InvalidParameterError):
            elgamal.generate_keys(23, 5, x=x)

    @pytest.mark.parametrize("message", [23, -1])
    def test_message_out_of_range(self, elgamal, elgamal_keys, message):
        """Test plaintexts outside [0, p) raise."""
        with pytest.raises(OutOfRangeError):
            elgamal.encrypt(elgamal_keys.public_key, message)

    def test_ephemeral_exponent_range(self, elgamal, elgamal_keys):
        """Test k outside [1, p-2] raises."""
        with pytest.raises(InvalidParameterError):
            elgamal.encrypt(elgamal_keys.public_key, 3, k=0)

    def test_zero_c1(self, elgamal, elgamal_keys):
        """Test c1 = 0 has no shared-secret inverse."""
        with pytest.raises(DivisionByZeroError):
            elgamal.decrypt(elgamal_keys.private_key, ElGamalCiphertext(c1=0, c2=5, p=23))

    def test_component_outside_field(self, elgamal, elgamal_keys):
        """Test components >= p raise."""
        with pytest.raises(InvalidParameterError):
            elgamal.decrypt(elgamal_keys.private_key, ElGamalCiphertext(c1=2, c2=30, p=23))

    def test_composite_key_modulus(self, elgamal):
        """Test a private key over a composite modulus is refused."""
        with pytest.raises(InvalidParameterError, match="p must be prime"):
            elgamal.decrypt(ElGamalPrivateKey(x=2, p=21), ElGamalCiphertext(c1=4, c2=5, p=21))

    def test_ciphertexts_carry_only_values(self):
        """Test ciphertexts hold their components and modulus, nothing more."""
        assert [f.name for f in fields(ElGamalCiphertext)] == ["c1", "c2", "p"]
        assert [f.name for f in fields(PaillierCiphertext)] == ["value", "n"]

    def test_mixed_scheme(self, elgamal, elgamal_keys):
        """Test a Paillier ciphertext is refused."""
        local = elgamal.encrypt(elgamal_keys.public_key, 3)
        with pytest.raises(TypeMismatchError):
            elgamal.combine(elgamal_keys.public_key, local, PaillierCiphertext(value=5, n=3233))

    def test_different_group(self, elgamal, elgamal_keys):
        """Test ciphertexts from another group are refused."""
        other = elgamal.generate_keys(47, 5)
        foreign = elgamal.encrypt(other.public_key, 3)
        with pytest.raises(TypeMismatchError):
            elgamal.decrypt(elgamal_keys.private_key, foreign)

    def test_demo(self, elgamal, elgamal_keys):
        """Test the multiplicative walkthrough."""
        result = elgamal.demo(elgamal_keys, [2, 3, 3])

        assert result.scheme == HomomorphicScheme.ELGAMAL
        assert result.result == 18


class TestSingletons:
    """Tests for the shared engines."""

    def test_shared_engines_use_default_provider(self):
        """Test the module-level engines work without an explicit provider."""
        keys = paillier_engine.generate_keys(61, 53)
        c = paillier_engine.encrypt(keys.public_key, 9)
        assert paillier_engine.decrypt(keys.private_key, c) == 9

        eg = elgamal_engine.generate_keys(23, 5)
        assert elgamal_engine.decrypt(eg.private_key, elgamal_engine.encrypt(eg.public_key, 9)) == 9
