"""Pedersen Commitment Engine.

commit(m, r) = g^m * h^r mod p

- Hiding: for uniform r the commitment says nothing about m
- Binding: opening to a different m requires log_g(h)

Binding only holds if nobody knows log_g(h). The demo parameters
(p=23, g=5, h=7) make that logarithm trivial to find; setup() with a
key size derives h from a public seed instead. This precondition is
documented, not checked.

References:
- Pedersen, T. P. "Non-Interactive and Information-Theoretic Secure
  Verifiable Secret Sharing" (CRYPTO 1991)
"""

from dataclasses import dataclass

from cryptolab.core.arithmetic import require_prime, sample_field
from cryptolab.core.errors import InvalidParameterError
from cryptolab.core.groups import (
    DEFAULT_PEDERSEN_SEED,
    DEMO_DL_GROUP,
    DEMO_PEDERSEN_H,
    derive_independent_generator,
    generate_dl_group,
)
from cryptolab.core.randomness import RandomnessProvider, get_randomness


@dataclass(frozen=True)
class PedersenParams:
    """Public parameters (p, g, h)."""

    p: int
    g: int
    h: int


@dataclass(frozen=True)
class CommitmentResult:
    """A commitment plus the randomness needed to open it later."""

    commitment: int
    randomness: int


@dataclass(frozen=True)
class CommitmentDemoResult:
    """Commit-then-open walkthrough."""

    params: PedersenParams
    message: int
    randomness: int
    commitment: int
    is_valid: bool


class PedersenEngine:
    """Pedersen commitments over Z_p^*.

    Usage:
        engine = PedersenEngine()
        params = engine.setup()

        result = engine.commit(params, 15)
        assert engine.open(params, result.commitment, 15, result.randomness)
    """

    def __init__(self, rng: RandomnessProvider | None = None):
        self._rng = rng

    @property
    def rng(self) -> RandomnessProvider:
        return self._rng or get_randomness()

    def setup(
        self,
        key_size: int | None = None,
        seed: bytes = DEFAULT_PEDERSEN_SEED,
    ) -> PedersenParams:
        """Return public parameters.

        Args:
            key_size: None for the demo group, otherwise the bit length of
                a freshly generated safe-prime group
            seed: Public seed h is derived from (generated groups only)
        """
        if key_size is None:
            return PedersenParams(p=DEMO_DL_GROUP.p, g=DEMO_DL_GROUP.g, h=DEMO_PEDERSEN_H)

        group = generate_dl_group(key_size)
        h = derive_independent_generator(group.p, group.g, seed)
        return PedersenParams(p=group.p, g=group.g, h=h)

    def validate_params(self, params: PedersenParams) -> None:
        """Range-check parameters (independence of h cannot be checked).

        Raises:
            InvalidParameterError: If p is not prime, or g, h are not
                distinct elements of (1, p)
        """
        require_prime(params.p)
        for name, value in (("g", params.g), ("h", params.h)):
            if not 1 < value < params.p:
                raise InvalidParameterError(f"{name} must lie in (1, {params.p})")
        if params.g == params.h:
            raise InvalidParameterError("g and h must differ")

    def commit(
        self,
        params: PedersenParams,
        message: int,
        randomness: int | None = None,
    ) -> CommitmentResult:
        """Commit to message; randomness in [0, p-2] is sampled if not given."""
        self.validate_params(params)
        if message < 0:
            raise InvalidParameterError("Message must be non-negative")

        if randomness is None:
            randomness = sample_field(params.p - 1, self.rng)
        elif randomness < 0:
            raise InvalidParameterError("Randomness must be non-negative")

        return CommitmentResult(
            commitment=self._compute(params, message, randomness),
            randomness=randomness,
        )

    def open(self, params: PedersenParams, commitment: int, message: int, randomness: int) -> bool:
        """Check that (message, randomness) opens commitment."""
        self.validate_params(params)
        if message < 0 or randomness < 0:
            raise InvalidParameterError("Message and randomness must be non-negative")
        return commitment == self._compute(params, message, randomness)

    def demo(self, params: PedersenParams, message: int) -> CommitmentDemoResult:
        """Commit to message and immediately open it."""
        result = self.commit(params, message)
        return CommitmentDemoResult(
            params=params,
            message=message,
            randomness=result.randomness,
            commitment=result.commitment,
            is_valid=self.open(params, result.commitment, message, result.randomness),
        )

    @staticmethod
    def _compute(params: PedersenParams, message: int, randomness: int) -> int:
        p = params.p
        return pow(params.g, message, p) * pow(params.h, randomness, p) % p


# Singleton instance
pedersen_engine = PedersenEngine()
