"""Helpers shared by the API routers."""

from fastapi import HTTPException, status

from cryptolab.core.arithmetic import from_hex
from cryptolab.core.errors import FieldCryptoError, InvalidParameterError


def parse_hex(value: str, field_name: str) -> int:
    """Decode a radix-16 field, answering 400 on malformed input."""
    try:
        return from_hex(value)
    except InvalidParameterError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid hexadecimal number in {field_name}",
        )


def parse_optional_hex(value: str | None, field_name: str) -> int | None:
    """Decode an optional radix-16 field."""
    if value is None:
        return None
    return parse_hex(value, field_name)


def bad_request(error: FieldCryptoError) -> HTTPException:
    """Translate an engine error into a 400 response."""
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


def parse_hex_or_default(value: str | None, field_name: str, default: int) -> int:
    """Decode an optional radix-16 field, using default only when it is absent."""
    parsed = parse_optional_hex(value, field_name)
    return default if parsed is None else parsed
