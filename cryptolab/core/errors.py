"""Errors raised by the protocol engines.

All engines report failures synchronously through this hierarchy and
leave their inputs untouched. A failed verification or opening is a
normal ``False`` result, never an exception.
"""


class FieldCryptoError(Exception):
    """Base class for protocol toolkit errors."""

    pass


class InvalidParameterError(FieldCryptoError, ValueError):
    """Malformed field element, modulus, or other parameter."""

    pass


class OutOfRangeError(InvalidParameterError):
    """Secret or message outside the plaintext space."""

    pass


class InvalidThresholdError(InvalidParameterError):
    """Threshold is below 2 or exceeds the number of shares."""

    pass


class DivisionByZeroError(FieldCryptoError, ZeroDivisionError):
    """Element has no inverse in the field or ring."""

    pass


class TypeMismatchError(FieldCryptoError, TypeError):
    """Operands belong to different schemes or different moduli."""

    pass
