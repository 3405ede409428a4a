"""Group parameter generation.

The demo groups (p = 23, Paillier n = 61 * 53) are what the walkthroughs
use. This module produces properly sized parameters instead:

- Discrete-log groups for ElGamal, Schnorr and Pedersen, from OpenSSL's
  safe-prime DH parameter generation
- Paillier primes taken from a freshly generated RSA key
- Independent Pedersen generators derived from a public seed, so that
  nobody knows log_g(h)

Parameter generation is slow (safe primes especially); callers should
generate once per session and pass the result around.
"""

import hashlib
from dataclasses import dataclass

from cryptography.hazmat.primitives.asymmetric import dh, rsa

from cryptolab.core.arithmetic import require_prime
from cryptolab.core.errors import InvalidParameterError
from cryptolab.core.logging import get_logger, log_operation

logger = get_logger(__name__)

MIN_DL_KEY_SIZE = 512  # OpenSSL refuses smaller DH groups
MIN_PAILLIER_KEY_SIZE = 1024

DEFAULT_PEDERSEN_SEED = b"cryptolab-pedersen-h"


@dataclass(frozen=True)
class GroupParameters:
    """Prime modulus p and generator g."""

    p: int
    g: int

    @property
    def order(self) -> int:
        """Order of Z_p^*."""
        return self.p - 1


# Demo groups
DEMO_SHAMIR_PRIME = 97
DEMO_PAILLIER_PRIMES = (61, 53)
DEMO_DL_GROUP = GroupParameters(p=23, g=5)
DEMO_PEDERSEN_H = 7


@log_operation("Discrete-log group generation")
def generate_dl_group(key_size: int = 2048) -> GroupParameters:
    """Generate a safe-prime group p = 2q + 1 with generator 2.

    Args:
        key_size: Bit length of p (at least 512)

    Returns:
        GroupParameters with a safe prime p
    """
    if key_size < MIN_DL_KEY_SIZE:
        raise InvalidParameterError(f"key_size must be at least {MIN_DL_KEY_SIZE} bits")

    logger.info("Generating discrete-log group", bits=key_size)
    numbers = dh.generate_parameters(generator=2, key_size=key_size).parameter_numbers()
    return GroupParameters(p=numbers.p, g=numbers.g)


@log_operation("Paillier prime generation")
def generate_paillier_primes(key_size: int = 2048) -> tuple[int, int]:
    """Generate two distinct primes whose product has key_size bits.

    Args:
        key_size: Bit length of n = p * q (at least 1024)

    Returns:
        Tuple (p, q)
    """
    if key_size < MIN_PAILLIER_KEY_SIZE:
        raise InvalidParameterError(
            f"key_size must be at least {MIN_PAILLIER_KEY_SIZE} bits"
        )

    logger.info("Generating Paillier primes", bits=key_size)
    private_numbers = rsa.generate_private_key(
        public_exponent=65537, key_size=key_size
    ).private_numbers()
    return private_numbers.p, private_numbers.q


def derive_independent_generator(
    p: int,
    g: int,
    seed: bytes = DEFAULT_PEDERSEN_SEED,
) -> int:
    """Hash a public seed into the group to get a second generator h.

    Candidates are SHA-256(seed || counter) expanded to the size of p,
    reduced mod p and squared, so h lands in the subgroup of quadratic
    residues. Anyone can rerun the derivation, and nobody learns log_g(h).

    Args:
        p: Prime modulus
        g: First generator (h is rejected if it equals g)
        seed: Public derivation seed

    Returns:
        Generator h with 1 < h < p
    """
    require_prime(p)
    if p < 7:
        raise InvalidParameterError("p is too small to hold two distinct residues")
    width = (p.bit_length() + 7) // 8 + 16

    counter = 0
    while True:
        stream = b""
        block = 0
        while len(stream) < width:
            stream += hashlib.sha256(
                seed
                + counter.to_bytes(4, "big")
                + block.to_bytes(4, "big")
            ).digest()
            block += 1
        candidate = pow(int.from_bytes(stream[:width], "big") % p, 2, p)
        if candidate not in (0, 1, g % p):
            return candidate
        counter += 1
