"""Base32 and big-endian integer encoding used by TOTP."""
import re
import base64
import binascii

from ..exceptions import ConfigurationError, ParseError

BASE32_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"

_WHITESPACE = re.compile(r"\s+")
_INVALID_CHAR = re.compile(f"[^{BASE32_ALPHABET}]")
# unpadded length % 8 for which RFC 4648 has a valid final quantum
_VALID_REMAINDERS = frozenset({0, 2, 4, 5, 7})


def normalize_base32(text: str) -> str:
    """Strip whitespace and padding, and uppercase a Base32 string."""
    return _WHITESPACE.sub("", text).upper().rstrip("=")


def base32_decode(text: str) -> bytes:
    """Decode a Base32 secret as typed by a user.

    Whitespace and case are ignored and ``=`` padding is optional.

    Raises:
        ParseError: On characters outside A-Z/2-7 or an impossible length.
    """
    cleaned = normalize_base32(text)
    bad = _INVALID_CHAR.search(cleaned)
    if bad:
        raise ParseError(f"Invalid Base32 character: {bad.group()!r}")
    if len(cleaned) % 8 not in _VALID_REMAINDERS:
        raise ParseError(f"Invalid Base32 length: {len(cleaned)}")
    padded = cleaned + "=" * (-len(cleaned) % 8)
    try:
        return base64.b32decode(padded)
    except binascii.Error as err:
        raise ParseError(f"Invalid Base32 data: {err}") from err


def base32_encode(data: bytes, padding: bool = False) -> str:
    """Encode bytes as Base32, without ``=`` padding unless asked for."""
    encoded = base64.b32encode(data).decode("ascii")
    return encoded if padding else encoded.rstrip("=")


def int_to_bytes(value: int, length: int = 8) -> bytes:
    """Encode a non-negative integer as a fixed-width big-endian byte string.

    Raises:
        ConfigurationError: If the value is negative or does not fit.
    """
    try:
        return value.to_bytes(length, "big", signed=False)
    except OverflowError as err:
        raise ConfigurationError(
            f"{value} does not fit in {length} unsigned bytes"
        ) from err
