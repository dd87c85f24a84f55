"""
TOTP Engine — RFC 6238 time-based one-time passwords.

    counter = floor(timestamp / period)
    mac     = HMAC-<algorithm>(base32_decode(secret), counter as 8B big-endian)
    code    = dynamic_truncate(mac) mod 10^digits, zero padded

Provisioning URIs follow the Key URI format:
    otpauth://totp/<label>?secret=BASE32&issuer=NAME&algorithm=SHA1&digits=6&period=30

Security Note:
    Never log secrets or generated codes.
"""
import hmac
import time
import struct
import secrets
import logging
from typing import Optional
from urllib.parse import parse_qs, quote, unquote, urlencode, urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..exceptions import ConfigurationError
from .codec import base32_decode, base32_encode, int_to_bytes, normalize_base32
from .keyed_hash import HashAlgorithm, hmac_digest

logger = logging.getLogger("securevault.totp")

DEFAULT_ALGORITHM = HashAlgorithm.SHA1
DEFAULT_DIGITS = 6
DEFAULT_PERIOD = 30

OTPAUTH_SCHEME = "otpauth"
OTPAUTH_TYPE = "totp"


class TOTPConfig(BaseModel):
    """TOTP parameters attached to a credential."""

    model_config = ConfigDict(frozen=True)

    secret: str
    algorithm: HashAlgorithm = DEFAULT_ALGORITHM
    # 31-bit truncated values have at most 10 decimal digits
    digits: int = Field(default=DEFAULT_DIGITS, ge=1, le=10)
    period: int = Field(default=DEFAULT_PERIOD, ge=1)

    @field_validator("secret")
    @classmethod
    def validate_secret(cls, v: str) -> str:
        """Normalize the secret and make sure it is decodable Base32."""
        cleaned = normalize_base32(v)
        if not cleaned:
            raise ConfigurationError("TOTP secret is required")
        base32_decode(cleaned)
        return cleaned

    @field_validator("algorithm", mode="before")
    @classmethod
    def parse_algorithm(cls, v):
        if isinstance(v, str):
            return v.strip().upper().replace("-", "")
        return v


class OTPAuthURI(BaseModel):
    """Parsed ``otpauth://totp/...`` provisioning URI."""

    model_config = ConfigDict(frozen=True)

    label: str
    issuer: Optional[str] = None
    totp: TOTPConfig

    def to_uri(self) -> str:
        return build_otpauth_uri(self.label, self.totp, issuer=self.issuer)


# ---------------------------------------------------------------------------
# Code generation
# ---------------------------------------------------------------------------

def _truncate(mac: bytes, digits: int) -> str:
    """RFC 4226 dynamic truncation."""
    offset = mac[-1] & 0x0F
    binary = struct.unpack(">I", mac[offset:offset + 4])[0] & 0x7FFFFFFF
    return str(binary % 10 ** digits).zfill(digits)


def generate_code(config: TOTPConfig, timestamp: Optional[float] = None) -> str:
    """Generate the TOTP code for a point in time.

    Args:
        config: TOTP parameters.
        timestamp: Unix time in seconds; defaults to now.

    Returns:
        Zero-padded code of ``config.digits`` digits.

    Raises:
        ParseError: If the secret is not valid Base32.
        ConfigurationError: If the timestamp is negative.
    """
    if timestamp is None:
        timestamp = time.time()
    key = base32_decode(config.secret)
    counter = int(timestamp // config.period)
    mac = hmac_digest(key, int_to_bytes(counter, 8), config.algorithm)
    return _truncate(mac, config.digits)


def time_remaining(period: int = DEFAULT_PERIOD, now: Optional[float] = None) -> int:
    """Seconds until the current code rolls over, in ``[1, period]``."""
    if period <= 0:
        raise ConfigurationError(f"period must be positive, got {period}")
    if now is None:
        now = time.time()
    return period - int(now) % period


def verify_code(
    code: str,
    config: TOTPConfig,
    window: int = 1,
    timestamp: Optional[float] = None,
) -> bool:
    """Check a code against the ``window`` periods either side of ``timestamp``.

    All candidates are compared in constant time, and every candidate is
    checked even after a match.
    """
    if window < 0:
        raise ConfigurationError(f"window must be non-negative, got {window}")
    if timestamp is None:
        timestamp = time.time()
    given = code.strip().encode("utf-8")
    matched = False
    for step in range(-window, window + 1):
        at = timestamp + step * config.period
        if at < 0:
            continue
        expected = generate_code(config, at).encode("ascii")
        if hmac.compare_digest(expected, given):
            matched = True
    return matched


def generate_secret(length: int = 20) -> str:
    """Generate a random Base32 TOTP secret from ``length`` random bytes."""
    if length <= 0:
        raise ConfigurationError(f"length must be positive, got {length}")
    return base32_encode(secrets.token_bytes(length))


# ---------------------------------------------------------------------------
# otpauth:// URIs
# ---------------------------------------------------------------------------

def parse_otpauth_uri(uri: str) -> Optional[OTPAuthURI]:
    """Parse an ``otpauth://totp/`` URI.

    Missing optional parameters take their defaults and unknown parameters
    are ignored.

    Returns:
        The parsed URI, or None if it is malformed (wrong scheme or type,
        missing or invalid secret, unsupported algorithm, non-numeric
        digits/period).
    """
    try:
        parts = urlsplit(uri.strip())
    except (AttributeError, ValueError):
        return None
    if parts.scheme.lower() != OTPAUTH_SCHEME:
        return None
    if parts.netloc.lower() != OTPAUTH_TYPE:
        return None

    params = parse_qs(parts.query)
    values = {
        name: params[name][0]
        for name in ("secret", "issuer", "algorithm", "digits", "period")
        if name in params
    }
    if not values.get("secret"):
        return None

    label = unquote(parts.path[1:] if parts.path.startswith("/") else parts.path)
    issuer = values.pop("issuer", None) or None
    try:
        return OTPAuthURI(
            label=label,
            issuer=issuer,
            totp=TOTPConfig(**values),
        )
    except ValidationError as err:
        logger.debug("Rejected otpauth URI: %d invalid field(s)", err.error_count())
        return None


def build_otpauth_uri(
    label: str,
    config: TOTPConfig,
    issuer: Optional[str] = None,
) -> str:
    """Build the ``otpauth://totp/`` URI for a TOTP config.

    Parameters equal to their defaults are omitted.
    """
    query = [("secret", config.secret)]
    if issuer:
        query.append(("issuer", issuer))
    if config.algorithm != DEFAULT_ALGORITHM:
        query.append(("algorithm", config.algorithm.value))
    if config.digits != DEFAULT_DIGITS:
        query.append(("digits", str(config.digits)))
    if config.period != DEFAULT_PERIOD:
        query.append(("period", str(config.period)))
    return (
        f"{OTPAUTH_SCHEME}://{OTPAUTH_TYPE}/{quote(label, safe='@:')}"
        f"?{urlencode(query, quote_via=quote)}"
    )
