"""Schnorr Identification Engine.

Three-move zero-knowledge proof of knowledge of a discrete logarithm:

    Prover                                  Verifier
    r <- [1, p-2], A = g^r mod p   --A-->
                                   <--c--   c <- [0, p-2]
    s = r + x*c mod (p-1)          --s-->   accept iff g^s == A * y^c mod p

The engine is stateless: each move is a separate call taking every value
it needs. Keeping the nonce r private between commit and respond, and
running the moves in order, is the caller's job (the HTTP layer ties the
moves together with a protocol session header).

References:
- Schnorr, C. P. "Efficient Identification and Signatures for Smart Cards"
  (CRYPTO 1989)
"""

from dataclasses import dataclass

from cryptolab.core.arithmetic import check_generator, require_prime, sample_field
from cryptolab.core.errors import InvalidParameterError
from cryptolab.core.logging import get_logger
from cryptolab.core.randomness import RandomnessProvider, get_randomness

logger = get_logger(__name__)


@dataclass(frozen=True)
class SchnorrParams:
    """Public parameters: group (p, g) and public key y = g^x mod p."""

    p: int
    g: int
    y: int


@dataclass(frozen=True)
class SchnorrPrivateKey:
    """Prover's secret exponent."""

    x: int


@dataclass(frozen=True)
class SchnorrCommitment:
    """First move. Only the commitment is sent; the nonce stays with the prover."""

    commitment: int
    nonce: int


@dataclass(frozen=True)
class SchnorrTranscript:
    """Complete proof transcript (A, c, s)."""

    commitment: int
    challenge: int
    response: int


def _require_non_negative(**values: int) -> None:
    for name, value in values.items():
        if value < 0:
            raise InvalidParameterError(f"{name} must be non-negative, got {value}")


class SchnorrEngine:
    """Schnorr identification protocol.

    Usage:
        engine = SchnorrEngine()
        params, key = engine.setup(23, 5)

        move = engine.commit(params.p, params.g)
        c = engine.challenge(params.p)
        s = engine.respond(move.nonce, key.x, c, params.p)
        assert engine.verify(move.commitment, c, s, params.y, params.p, params.g)
    """

    def __init__(self, rng: RandomnessProvider | None = None):
        self._rng = rng

    @property
    def rng(self) -> RandomnessProvider:
        return self._rng or get_randomness()

    def setup(
        self,
        p: int,
        g: int,
        x: int | None = None,
    ) -> tuple[SchnorrParams, SchnorrPrivateKey]:
        """Create public parameters and the prover's private key.

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

        return SchnorrParams(p=p, g=g, y=pow(g, x, p)), SchnorrPrivateKey(x=x)

    def commit(self, p: int, g: int, r: int | None = None) -> SchnorrCommitment:
        """Prover's first move: A = g^r mod p."""
        require_prime(p)
        if r is None:
            r = sample_field(p - 1, self.rng, nonzero=True)
        elif not 1 <= r <= p - 2:
            raise InvalidParameterError(f"Nonce must lie in [1, {p - 2}]")
        return SchnorrCommitment(commitment=pow(g, r, p), nonce=r)

    def challenge(self, p: int) -> int:
        """Verifier's move: uniform c in [0, p-2]."""
        require_prime(p)
        return sample_field(p - 1, self.rng)

    def respond(self, r: int, x: int, c: int, p: int) -> int:
        """Prover's second move: s = (r + x*c) mod (p-1)."""
        require_prime(p)
        _require_non_negative(nonce=r, private_exponent=x, challenge=c)
        return (r + x * c) % (p - 1)

    def verify(self, commitment: int, challenge: int, response: int, y: int, p: int, g: int) -> bool:
        """Accept iff g^s == A * y^c (mod p).

        A rejected proof returns False; only malformed inputs raise.
        """
        require_prime(p)
        _require_non_negative(
            commitment=commitment, challenge=challenge, response=response, y=y, g=g
        )
        left = pow(g, response, p)
        right = commitment * pow(y, challenge, p) % p
        valid = left == right

        logger.debug("Schnorr proof checked", valid=valid)
        return valid

    def prove(self, params: SchnorrParams, private_key: SchnorrPrivateKey) -> SchnorrTranscript:
        """Run all three moves locally and return the transcript."""
        move = self.commit(params.p, params.g)
        c = self.challenge(params.p)
        s = self.respond(move.nonce, private_key.x, c, params.p)
        return SchnorrTranscript(commitment=move.commitment, challenge=c, response=s)

    def verify_transcript(self, params: SchnorrParams, transcript: SchnorrTranscript) -> bool:
        """Verify a complete transcript against the public parameters."""
        return self.verify(
            transcript.commitment,
            transcript.challenge,
            transcript.response,
            params.y,
            params.p,
            params.g,
        )


# Singleton instance
schnorr_engine = SchnorrEngine()
