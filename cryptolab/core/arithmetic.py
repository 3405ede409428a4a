"""Modular arithmetic kernel.

Arbitrary-precision helpers shared by every protocol engine: modular
exponentiation, inverses, field sampling, primality and generator checks,
plus the radix-16 encoding used on the wire.

All functions are pure and safe to call concurrently.
"""

import math

from cryptolab.core.errors import DivisionByZeroError, InvalidParameterError
from cryptolab.core.randomness import RandomnessProvider, SecureRandomness

# Deterministic Miller-Rabin witnesses for n < 3.3 * 10^24
_MR_BASES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41)

# Largest p for which p-1 is factored to check generators
_MAX_FACTOR_BITS = 64

# Trial division bound before switching to Pollard's rho
_TRIAL_DIVISION_LIMIT = 1000

_secure = SecureRandomness()


def _check_modulus(modulus: int) -> None:
    if modulus < 1:
        raise InvalidParameterError(f"Modulus must be positive, got {modulus}")


def mod_pow(base: int, exponent: int, modulus: int) -> int:
    """Compute base^exponent mod modulus.

    Negative bases are normalized into [0, modulus) first. Python's
    three-argument pow() is square-and-multiply on arbitrary-precision
    integers.

    Raises:
        InvalidParameterError: If exponent is negative or modulus < 1
    """
    _check_modulus(modulus)
    if exponent < 0:
        raise InvalidParameterError("Exponent must be non-negative")
    if exponent == 0:
        return 1 % modulus
    return pow(base % modulus, exponent, modulus)


def mod_inverse(a: int, p: int) -> int:
    """Inverse of a modulo prime p via Fermat's little theorem: a^(p-2).

    Raises:
        DivisionByZeroError: If a = 0 (mod p)
    """
    _check_modulus(p)
    if a % p == 0:
        raise DivisionByZeroError(f"{a} has no inverse modulo {p}")
    return mod_pow(a, p - 2, p)


def unit_inverse(a: int, modulus: int) -> int:
    """Inverse of a modulo any modulus (extended Euclid).

    Raises:
        DivisionByZeroError: If gcd(a, modulus) != 1
    """
    _check_modulus(modulus)
    if math.gcd(a, modulus) != 1:
        raise DivisionByZeroError(f"{a} is not invertible modulo {modulus}")
    return pow(a, -1, modulus)


def lcm(a: int, b: int) -> int:
    """Least common multiple."""
    return abs(a * b) // math.gcd(a, b)


def sample_field(
    modulus: int,
    rng: RandomnessProvider | None = None,
    nonzero: bool = False,
) -> int:
    """Draw a uniform element of [0, modulus), or [1, modulus-1] if nonzero."""
    _check_modulus(modulus)
    rng = rng or _secure
    low = 1 if nonzero else 0
    return rng.randint(low, modulus - 1)


def is_probable_prime(n: int) -> bool:
    """Miller-Rabin primality test with fixed witnesses.

    Exact below 3.3 * 10^24; beyond that a composite passes with
    probability at most 4^-13.
    """
    if n < 2:
        return False
    for small in _MR_BASES:
        if n % small == 0:
            return n == small

    # Write n-1 as 2^r * d
    r, d = 0, n - 1
    while d % 2 == 0:
        r += 1
        d //= 2

    for a in _MR_BASES:
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(r - 1):
            x = pow(x, 2, n)
            if x == n - 1:
                break
        else:
            return False
    return True


def require_prime(p: int, name: str = "p") -> None:
    """Raise InvalidParameterError unless p is (probably) prime."""
    if not is_probable_prime(p):
        raise InvalidParameterError(f"{name} must be prime, got {p}")


def _pollard_rho(n: int) -> int:
    """Non-trivial factor of an odd composite n (Floyd cycle, f(x) = x^2 + c)."""
    for c in range(1, n):
        x = y = 2
        d = 1
        while d == 1:
            x = (x * x + c) % n
            y = (y * y + c) % n
            y = (y * y + c) % n
            d = math.gcd(x - y, n)
        if d != n:
            return d
    raise InvalidParameterError(f"Could not factor {n}")


def prime_factors(n: int) -> list[int]:
    """Distinct prime factors of n, ascending.

    Small factors are removed by trial division; whatever remains is split
    with Pollard's rho, so a 64-bit n factors in milliseconds.
    """
    factors = set()
    d = 2
    while d < _TRIAL_DIVISION_LIMIT and d * d <= n:
        if n % d == 0:
            factors.add(d)
            while n % d == 0:
                n //= d
        d += 1 if d == 2 else 2

    pending = [n] if n > 1 else []
    while pending:
        m = pending.pop()
        if is_probable_prime(m):
            factors.add(m)
        else:
            f = _pollard_rho(m)
            pending.extend((f, m // f))
    return sorted(factors)


def is_generator(g: int, p: int) -> bool:
    """Check that g generates the multiplicative group mod prime p."""
    if not 1 < g < p:
        return p == 2 and g == 1
    order = p - 1
    return all(pow(g, order // q, p) != 1 for q in prime_factors(order))


def check_generator(g: int, p: int) -> None:
    """Validate g as a generator of Z_p^*.

    The full check factors p-1 (trial division plus Pollard's rho), so it
    only runs for p up to 64 bits; larger groups are only range-checked.

    Raises:
        InvalidParameterError: If g is out of range or provably not a generator
    """
    if not 1 < g < p:
        raise InvalidParameterError(f"Generator must lie in (1, {p}), got {g}")
    if p.bit_length() <= _MAX_FACTOR_BITS and not is_generator(g, p):
        raise InvalidParameterError(f"{g} does not generate Z_{p}^*")


def to_hex(value: int) -> str:
    """Encode a non-negative integer as lowercase radix-16 without prefix."""
    return format(value, "x")


def from_hex(text: str) -> int:
    """Decode a radix-16 string (optional 0x prefix).

    Raises:
        InvalidParameterError: If the text is not hexadecimal
    """
    try:
        value = int(text, 16)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"Not a hexadecimal number: {text!r}")
    if value < 0:
        raise InvalidParameterError(f"Negative field element: {text!r}")
    return value
