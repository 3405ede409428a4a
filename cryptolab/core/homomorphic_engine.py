"""Homomorphic Encryption Engines.

Two independent schemes that compute on ciphertexts:

- Paillier (additive): Enc(m1) * Enc(m2) mod n^2 decrypts to m1 + m2 mod n,
  and Enc(m)^k decrypts to k * m mod n
- ElGamal (multiplicative): component-wise product of (c1, c2) pairs
  decrypts to m1 * m2 mod p

Keys and ciphertexts are immutable values. Engines hold no key state;
every operation takes the key it needs. Ciphertexts remember the modulus
they were made under, and combining ciphertexts from another scheme or
another key raises TypeMismatchError instead of silently producing garbage.

Caveats:
- Demo keys (n = 61 * 53, p = 23) are trivially breakable
- Textbook ElGamal over Z_p^* leaks quadratic residuosity of m

References:
- Paillier, P. "Public-Key Cryptosystems Based on Composite Degree
  Residuosity Classes" (EUROCRYPT 1999)
- ElGamal, T. "A Public Key Cryptosystem and a Signature Scheme Based on
  Discrete Logarithms" (1985)
"""

import math
from dataclasses import dataclass
from enum import Enum
from functools import reduce
from typing import Sequence

from cryptolab.core.arithmetic import (
    check_generator,
    lcm,
    mod_inverse,
    require_prime,
    sample_field,
    unit_inverse,
)
from cryptolab.core.errors import (
    InvalidParameterError,
    OutOfRangeError,
    TypeMismatchError,
)
from cryptolab.core.groups import generate_paillier_primes
from cryptolab.core.logging import get_logger
from cryptolab.core.randomness import RandomnessProvider, get_randomness

logger = get_logger(__name__)


class HomomorphicScheme(str, Enum):
    """Supported homomorphic schemes."""

    PAILLIER = "paillier"  # additive
    ELGAMAL = "elgamal"  # multiplicative


# ============================================================================
# Paillier
# ============================================================================

@dataclass(frozen=True)
class PaillierPublicKey:
    """Paillier public key n = p * q, with generator g = n + 1."""

    n: int

    @property
    def g(self) -> int:
        return self.n + 1

    @property
    def n_squared(self) -> int:
        return self.n * self.n


@dataclass(frozen=True)
class PaillierPrivateKey:
    """Paillier private key (lambda, mu) for modulus n."""

    lam: int  # lcm(p-1, q-1)
    mu: int  # lambda^-1 mod n
    n: int


@dataclass(frozen=True)
class PaillierKeyPair:
    """Paillier public/private key pair."""

    public_key: PaillierPublicKey
    private_key: PaillierPrivateKey


@dataclass(frozen=True)
class PaillierCiphertext:
    """Paillier ciphertext c in Z_{n^2}^*."""

    value: int
    n: int


@dataclass(frozen=True)
class HomomorphicDemoResult:
    """Encrypt several values, fold them homomorphically, decrypt."""

    scheme: HomomorphicScheme
    values: list[int]
    ciphertexts: list
    combined: object
    result: int


class PaillierEngine:
    """Paillier additive homomorphic encryption.

    Usage:
        engine = PaillierEngine()
        keys = engine.generate_keys(61, 53)

        c = engine.combine(keys.public_key,
                           engine.encrypt(keys.public_key, 10),
                           engine.encrypt(keys.public_key, 20))
        assert engine.decrypt(keys.private_key, c) == 30
    """

    def __init__(self, rng: RandomnessProvider | None = None):
        self._rng = rng

    @property
    def rng(self) -> RandomnessProvider:
        return self._rng or get_randomness()

    def generate_keys(self, p: int, q: int) -> PaillierKeyPair:
        """Derive a key pair from two distinct primes.

        Raises:
            InvalidParameterError: If p or q is not prime, p == q, or
                gcd(pq, (p-1)(q-1)) != 1
        """
        require_prime(p, "p")
        require_prime(q, "q")
        if p == q:
            raise InvalidParameterError("p and q must be distinct")

        n = p * q
        if math.gcd(n, (p - 1) * (q - 1)) != 1:
            raise InvalidParameterError("gcd(pq, (p-1)(q-1)) must be 1")

        lam = lcm(p - 1, q - 1)
        # With g = n + 1, L(g^lambda mod n^2) = lambda mod n
        mu = unit_inverse(lam, n)

        logger.debug("Paillier keys generated", modulus_bits=n.bit_length())
        return PaillierKeyPair(
            public_key=PaillierPublicKey(n=n),
            private_key=PaillierPrivateKey(lam=lam, mu=mu, n=n),
        )

    def generate_random_keys(self, key_size: int = 2048) -> PaillierKeyPair:
        """Generate a key pair from fresh primes (modulus of key_size bits)."""
        p, q = generate_paillier_primes(key_size)
        return self.generate_keys(p, q)

    def encrypt(
        self,
        public_key: PaillierPublicKey,
        message: int,
        r: int | None = None,
    ) -> PaillierCiphertext:
        """Encrypt a message: c = g^m * r^n mod n^2.

        Args:
            public_key: Recipient public key
            message: Plaintext, 0 <= message < n
            r: Blinding factor coprime to n (sampled if not provided)

        Raises:
            OutOfRangeError: If message is outside [0, n)
            InvalidParameterError: If a supplied r is not a unit mod n
        """
        n, n_sq = public_key.n, public_key.n_squared
        if not 0 <= message < n:
            raise OutOfRangeError(f"Message must lie in [0, {n})")

        if r is None:
            r = sample_field(n, self.rng, nonzero=True)
            while math.gcd(r, n) != 1:
                r = sample_field(n, self.rng, nonzero=True)
        elif not 0 < r < n or math.gcd(r, n) != 1:
            raise InvalidParameterError("r must be a unit modulo n")

        value = pow(public_key.g, message, n_sq) * pow(r, n, n_sq) % n_sq
        return PaillierCiphertext(value=value, n=n)

    def decrypt(self, private_key: PaillierPrivateKey, ciphertext: PaillierCiphertext) -> int:
        """Decrypt: m = L(c^lambda mod n^2) * mu mod n, L(x) = (x - 1) / n."""
        self._check_ciphertext(private_key.n, ciphertext)
        n = private_key.n
        x = pow(ciphertext.value, private_key.lam, n * n)
        return (x - 1) // n * private_key.mu % n

    def combine(
        self,
        public_key: PaillierPublicKey,
        c1: PaillierCiphertext,
        c2: PaillierCiphertext,
    ) -> PaillierCiphertext:
        """Homomorphic addition: Dec(c1 * c2) = m1 + m2 mod n."""
        self._check_ciphertext(public_key.n, c1)
        self._check_ciphertext(public_key.n, c2)
        return PaillierCiphertext(
            value=c1.value * c2.value % public_key.n_squared,
            n=public_key.n,
        )

    def combine_many(
        self,
        public_key: PaillierPublicKey,
        ciphertexts: Sequence[PaillierCiphertext],
    ) -> PaillierCiphertext:
        """Fold combine() over a non-empty list of ciphertexts."""
        if not ciphertexts:
            raise InvalidParameterError("Need at least one ciphertext")
        self._check_ciphertext(public_key.n, ciphertexts[0])
        return reduce(lambda a, b: self.combine(public_key, a, b), ciphertexts)

    def scale(
        self,
        public_key: PaillierPublicKey,
        ciphertext: PaillierCiphertext,
        k: int,
    ) -> PaillierCiphertext:
        """Scalar multiplication: Dec(c^k) = k * m mod n.

        Negative k is reduced mod n first.
        """
        self._check_ciphertext(public_key.n, ciphertext)
        return PaillierCiphertext(
            value=pow(ciphertext.value, k % public_key.n, public_key.n_squared),
            n=public_key.n,
        )

    def demo(self, key_pair: PaillierKeyPair, values: Sequence[int]) -> HomomorphicDemoResult:
        """Encrypt values, add them under encryption, decrypt the sum."""
        ciphertexts = [self.encrypt(key_pair.public_key, v) for v in values]
        combined = self.combine_many(key_pair.public_key, ciphertexts)
        return HomomorphicDemoResult(
            scheme=HomomorphicScheme.PAILLIER,
            values=list(values),
            ciphertexts=ciphertexts,
            combined=combined,
            result=self.decrypt(key_pair.private_key, combined),
        )

    @staticmethod
    def _check_ciphertext(n: int, ciphertext) -> None:
        if not isinstance(ciphertext, PaillierCiphertext):
            raise TypeMismatchError(
                f"Expected a Paillier ciphertext, got {type(ciphertext).__name__}"
            )
        if ciphertext.n != n:
            raise TypeMismatchError("Ciphertext was produced under a different modulus")
        if not 0 < ciphertext.value < n * n:
            raise InvalidParameterError("Ciphertext outside Z_{n^2}")


# ============================================================================
# ElGamal
# ============================================================================

@dataclass(frozen=True)
class ElGamalPublicKey:
    """ElGamal public key (p, g, y = g^x mod p)."""

    p: int
    g: int
    y: int


@dataclass(frozen=True)
class ElGamalPrivateKey:
    """ElGamal private exponent x for the group mod p."""

    x: int
    p: int


@dataclass(frozen=True)
class ElGamalKeyPair:
    """ElGamal public/private key pair."""

    public_key: ElGamalPublicKey
    private_key: ElGamalPrivateKey


@dataclass(frozen=True)
class ElGamalCiphertext:
    """ElGamal ciphertext (c1, c2) = (g^k, m * y^k) mod p."""

    c1: int
    c2: int
    p: int


class ElGamalEngine:
    """ElGamal multiplicative homomorphic encryption.

    Usage:
        engine = ElGamalEngine()
        keys = engine.generate_keys(23, 5)

        c = engine.combine(keys.public_key,
                           engine.encrypt(keys.public_key, 3),
                           engine.encrypt(keys.public_key, 4))
        assert engine.decrypt(keys.private_key, c) == 12
    """

    def __init__(self, rng: RandomnessProvider | None = None):
        self._rng = rng

    @property
    def rng(self) -> RandomnessProvider:
        return self._rng or get_randomness()

    def generate_keys(self, p: int, g: int, x: int | None = None) -> ElGamalKeyPair:
        """Create a key pair in the group generated by g mod p.

        Args:
            p: Prime modulus
            g: Generator of Z_p^*
            x: Private exponent in [1, p-2] (sampled if not provided)

        Raises:
            InvalidParameterError: If p is not prime, g is not a generator,
                or x is out of range
        """
        require_prime(p)
        check_generator(g, p)

        if x is None:
            x = sample_field(p - 1, self.rng, nonzero=True)
        elif not 1 <= x <= p - 2:
            raise InvalidParameterError(f"Private exponent must lie in [1, {p - 2}]")

        logger.debug("ElGamal keys generated", modulus_bits=p.bit_length())
        return ElGamalKeyPair(
            public_key=ElGamalPublicKey(p=p, g=g, y=pow(g, x, p)),
            private_key=ElGamalPrivateKey(x=x, p=p),
        )

    def encrypt(
        self,
        public_key: ElGamalPublicKey,
        message: int,
        k: int | None = None,
    ) -> ElGamalCiphertext:
        """Encrypt a message with ephemeral exponent k.

        Raises:
            OutOfRangeError: If message is outside [0, p)
            InvalidParameterError: If a supplied k is outside [1, p-2]
        """
        p = public_key.p
        if not 0 <= message < p:
            raise OutOfRangeError(f"Message must lie in [0, {p})")

        if k is None:
            k = sample_field(p - 1, self.rng, nonzero=True)
        elif not 1 <= k <= p - 2:
            raise InvalidParameterError(f"Ephemeral exponent must lie in [1, {p - 2}]")

        return ElGamalCiphertext(
            c1=pow(public_key.g, k, p),
            c2=message * pow(public_key.y, k, p) % p,
            p=p,
        )

    def decrypt(self, private_key: ElGamalPrivateKey, ciphertext: ElGamalCiphertext) -> int:
        """Decrypt: s = c1^x, m = c2 * s^-1 mod p.

        Raises:
            InvalidParameterError: If the key modulus is not prime
            DivisionByZeroError: If c1 = 0 (no shared secret inverse)
        """
        require_prime(private_key.p)
        self._check_ciphertext(private_key.p, ciphertext)
        p = private_key.p
        shared = pow(ciphertext.c1, private_key.x, p)
        return ciphertext.c2 * mod_inverse(shared, p) % p

    def combine(
        self,
        public_key: ElGamalPublicKey,
        a: ElGamalCiphertext,
        b: ElGamalCiphertext,
    ) -> ElGamalCiphertext:
        """Homomorphic multiplication: component-wise product mod p."""
        self._check_ciphertext(public_key.p, a)
        self._check_ciphertext(public_key.p, b)
        p = public_key.p
        return ElGamalCiphertext(c1=a.c1 * b.c1 % p, c2=a.c2 * b.c2 % p, p=p)

    def combine_many(
        self,
        public_key: ElGamalPublicKey,
        ciphertexts: Sequence[ElGamalCiphertext],
    ) -> ElGamalCiphertext:
        """Fold combine() over a non-empty list of ciphertexts."""
        if not ciphertexts:
            raise InvalidParameterError("Need at least one ciphertext")
        self._check_ciphertext(public_key.p, ciphertexts[0])
        return reduce(lambda a, b: self.combine(public_key, a, b), ciphertexts)

    def demo(self, key_pair: ElGamalKeyPair, values: Sequence[int]) -> HomomorphicDemoResult:
        """Encrypt values, multiply them under encryption, decrypt the product."""
        ciphertexts = [self.encrypt(key_pair.public_key, v) for v in values]
        combined = self.combine_many(key_pair.public_key, ciphertexts)
        return HomomorphicDemoResult(
            scheme=HomomorphicScheme.ELGAMAL,
            values=list(values),
            ciphertexts=ciphertexts,
            combined=combined,
            result=self.decrypt(key_pair.private_key, combined),
        )

    @staticmethod
    def _check_ciphertext(p: int, ciphertext) -> None:
        if not isinstance(ciphertext, ElGamalCiphertext):
            raise TypeMismatchError(
                f"Expected an ElGamal ciphertext, got {type(ciphertext).__name__}"
            )
        if ciphertext.p != p:
            raise TypeMismatchError("Ciphertext was produced under a different modulus")
        if not (0 <= ciphertext.c1 < p and 0 <= ciphertext.c2 < p):
            raise InvalidParameterError("Ciphertext components outside Z_p")


# Singleton instances
paillier_engine = PaillierEngine()
elgamal_engine = ElGamalEngine()
