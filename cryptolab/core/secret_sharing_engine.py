"""Shamir Secret Sharing Engine.

Splits an integer secret into n shares over the prime field Z_p such that
any k shares reconstruct it (k-of-n threshold scheme).

Security Properties:
- Information-theoretic: k-1 shares reveal nothing about the secret
- Any k shares with distinct x reconstruct the secret exactly

Caveats:
- Reconstruction does not know the original threshold. Interpolating
  fewer than k shares returns a wrong field element, not an error.
- Shares are not authenticated. A forged (x, y) pair is interpolated like
  any other; only duplicate x-coordinates are detected.

References:
- Shamir, A. "How to share a secret." Communications of the ACM, 1979
"""

from dataclasses import dataclass
from typing import Sequence

from cryptolab.config import get_settings
from cryptolab.core.arithmetic import mod_inverse, require_prime, sample_field
from cryptolab.core.errors import (
    DivisionByZeroError,
    InvalidParameterError,
    InvalidThresholdError,
    OutOfRangeError,
)
from cryptolab.core.groups import DEMO_SHAMIR_PRIME
from cryptolab.core.logging import get_logger
from cryptolab.core.randomness import RandomnessProvider, get_randomness

logger = get_logger(__name__)


@dataclass(frozen=True)
class Share:
    """A single share: the polynomial evaluated at x."""

    x: int  # Share index, nonzero
    y: int  # f(x) mod p

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> "Share":
        try:
            return cls(x=int(data["x"]), y=int(data["y"]))
        except (KeyError, TypeError, ValueError):
            raise InvalidParameterError(f"Malformed share: {data!r}")


@dataclass(frozen=True)
class SharingDemoResult:
    """Outcome of a generate-then-reconstruct walkthrough."""

    secret: int
    shares: list[Share]
    subset: list[Share]
    reconstructed: int
    prime: int

    @property
    def success(self) -> bool:
        return self.secret == self.reconstructed


class SecretSharingEngine:
    """Shamir secret sharing over a fixed prime field.

    The engine keeps only its prime and randomness provider; every call is
    a pure function of its arguments.

    Usage:
        engine = SecretSharingEngine(prime=97)

        shares = engine.generate_shares(42, n=5, k=3)
        assert engine.reconstruct_secret([shares[0], shares[2], shares[4]]) == 42
    """

    def __init__(self, prime: int = DEMO_SHAMIR_PRIME, rng: RandomnessProvider | None = None):
        require_prime(prime, "prime")
        self.prime = prime
        self._rng = rng

    @property
    def rng(self) -> RandomnessProvider:
        return self._rng or get_randomness()

    def generate_shares(self, secret: int, n: int, k: int) -> list[Share]:
        """Split a secret into n shares with threshold k.

        Args:
            secret: The secret, 0 <= secret < prime
            n: Total number of shares
            k: Minimum shares needed to reconstruct

        Returns:
            n shares at x = 1..n

        Raises:
            InvalidThresholdError: If k < 2 or k > n
            InvalidParameterError: If n does not fit in the field
            OutOfRangeError: If the secret is not a field element
        """
        if k < 2:
            raise InvalidThresholdError("Threshold must be at least 2")
        if k > n:
            raise InvalidThresholdError(f"Threshold {k} cannot exceed share count {n}")
        if n >= self.prime:
            raise InvalidParameterError(
                f"At most {self.prime - 1} shares fit in the field Z_{self.prime}"
            )
        if not 0 <= secret < self.prime:
            raise OutOfRangeError(f"Secret must lie in [0, {self.prime})")

        # f(x) = secret + a1*x + ... + a_{k-1}*x^{k-1}
        coefficients = [secret]
        for _ in range(k - 1):
            coefficients.append(sample_field(self.prime, self.rng, nonzero=True))

        shares = [
            Share(x=x, y=self.evaluate_polynomial(coefficients, x))
            for x in range(1, n + 1)
        ]

        logger.debug("Shares generated", n=n, k=k, prime=self.prime)
        return shares

    def reconstruct_secret(self, shares: Sequence[Share]) -> int:
        """Recover f(0) by Lagrange interpolation over all given shares.

        The engine cannot check the original threshold; fewer than k
        shares yield an unrelated field element.

        Raises:
            InvalidParameterError: If fewer than 2 shares are given
            DivisionByZeroError: If two shares have the same x
        """
        if len(shares) < 2:
            raise InvalidParameterError("Need at least 2 shares to reconstruct")
        return self._lagrange_interpolate(shares, 0)

    def recover_share(self, shares: Sequence[Share], target_x: int) -> Share:
        """Interpolate the share a lost party held at target_x.

        Args:
            shares: At least threshold shares from the same polynomial
            target_x: x-coordinate of the share to rebuild

        Raises:
            InvalidParameterError: If target_x is 0, outside the field, or
                already present
            DivisionByZeroError: If two shares have the same x
        """
        if len(shares) < 2:
            raise InvalidParameterError("Need at least 2 shares to recover a share")
        if not 0 < target_x < self.prime:
            raise InvalidParameterError(f"target_x must lie in [1, {self.prime - 1}]")
        if any(share.x % self.prime == target_x for share in shares):
            raise InvalidParameterError(f"Share with x={target_x} already exists")
        return Share(x=target_x, y=self._lagrange_interpolate(shares, target_x))

    def demo(self, secret: int, n: int, k: int) -> SharingDemoResult:
        """Generate shares and reconstruct from the first k."""
        shares = self.generate_shares(secret, n, k)
        subset = shares[:k]
        return SharingDemoResult(
            secret=secret,
            shares=shares,
            subset=subset,
            reconstructed=self.reconstruct_secret(subset),
            prime=self.prime,
        )

    def evaluate_polynomial(self, coefficients: Sequence[int], x: int) -> int:
        """Evaluate polynomial at point x using Horner's method."""
        result = 0
        for coef in reversed(coefficients):
            result = (result * x + coef) % self.prime
        return result

    def _lagrange_interpolate(self, shares: Sequence[Share], x: int) -> int:
        """Lagrange interpolation at x in Z_p."""
        p = self.prime
        points = [(share.x % p, share.y % p) for share in shares]
        result = 0

        for i, (xi, yi) in enumerate(points):
            numerator = 1
            denominator = 1
            for j, (xj, _) in enumerate(points):
                if i != j:
                    numerator = numerator * ((x - xj) % p) % p
                    denominator = denominator * ((xi - xj) % p) % p

            try:
                basis = numerator * mod_inverse(denominator, p) % p
            except DivisionByZeroError as e:
                raise DivisionByZeroError(f"Duplicate share x-coordinate {xi}") from e

            result = (result + yi * basis) % p

        return result


_secret_sharing_engine: SecretSharingEngine | None = None


def get_secret_sharing_engine() -> SecretSharingEngine:
    """Get the engine for the configured field (created on first use)."""
    global _secret_sharing_engine
    if _secret_sharing_engine is None:
        _secret_sharing_engine = SecretSharingEngine(prime=get_settings().shamir_prime)
    return _secret_sharing_engine
