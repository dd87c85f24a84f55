"""Time-based one-time passwords (RFC 6238) for stored two-factor secrets."""

from .keyed_hash import HashAlgorithm, hmac_digest
from .codec import base32_decode, base32_encode, int_to_bytes
from .engine import (
    TOTPConfig,
    OTPAuthURI,
    generate_code,
    verify_code,
    time_remaining,
    generate_secret,
    parse_otpauth_uri,
    build_otpauth_uri,
)

__all__ = [
    "HashAlgorithm",
    "hmac_digest",
    "base32_decode",
    "base32_encode",
    "int_to_bytes",
    "TOTPConfig",
    "OTPAuthURI",
    "generate_code",
    "verify_code",
    "time_remaining",
    "generate_secret",
    "parse_otpauth_uri",
    "build_otpauth_uri",
]
