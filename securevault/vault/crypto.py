"""
Vault Crypto Core — Key derivation, vault encryption and master password checks.

Two independent derivations come out of the master password:
- Encryption key: PBKDF2-HMAC-SHA256(password, salt) → AES-256-GCM
- Verification hash: base64(SHA-256(password ‖ salt)), stored in the record

The verification hash never feeds the key derivation, so leaking it cannot
unlock the vault.

Encrypted blob format: [iv 12B][ciphertext][GCM tag 16B]

Security Note:
    Never log passwords, keys, salts, plaintext or ciphertext values.
    IVs are random 96-bit; a fresh one is drawn on every encrypt call.
"""
import os
import hmac
import base64
import binascii
import logging

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import AuthenticationFailure, ConfigurationError

logger = logging.getLogger("securevault.vault")

SALT_LENGTH = 16  # 128-bit salt
IV_LENGTH = 12  # 96-bit IV for GCM
TAG_LENGTH = 16  # GCM authentication tag
KEY_LENGTH = 32  # AES-256

# Record format version → PBKDF2 iteration count.
# Raising the cost means adding a new version; existing entries never change
# or older vaults would derive a different key.
PBKDF2_ITERATIONS: dict[int, int] = {
    1: 100_000,
}
FORMAT_VERSION = max(PBKDF2_ITERATIONS)


def iterations_for(format_version: int) -> int:
    """Return the PBKDF2 iteration count for a record format version.

    Raises:
        ConfigurationError: If the format version is unknown.
    """
    try:
        return PBKDF2_ITERATIONS[format_version]
    except KeyError:
        raise ConfigurationError(
            f"Unsupported vault format version: {format_version}"
        ) from None


def generate_salt() -> bytes:
    """Generate a cryptographically random 16-byte salt."""
    return os.urandom(SALT_LENGTH)


def _check_salt(salt: bytes) -> None:
    if len(salt) != SALT_LENGTH:
        raise ConfigurationError(
            f"salt must be exactly {SALT_LENGTH} bytes, got {len(salt)}"
        )


def _check_key(key: bytes) -> None:
    if len(key) != KEY_LENGTH:
        raise ConfigurationError(
            f"key must be exactly {KEY_LENGTH} bytes, got {len(key)}"
        )


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(
    master_password: str,
    salt: bytes,
    iterations: int | None = None,
) -> bytes:
    """Derive a 32-byte vault key from the master password using PBKDF2.

    Deterministic: the same password and salt always produce the same key.
    A wrong password is not detectable here; it surfaces as a tag failure
    on decrypt or as a verification hash mismatch.

    Args:
        master_password: User's master password.
        salt: 16-byte vault salt.
        iterations: PBKDF2 iteration count; defaults to the count of the
            current format version.

    Returns:
        32-byte derived key.

    Raises:
        ConfigurationError: If the salt is not 16 bytes long, or the
            iteration count is not positive.
    """
    _check_salt(salt)
    if iterations is None:
        iterations = PBKDF2_ITERATIONS[FORMAT_VERSION]
    elif iterations < 1:
        raise ConfigurationError(
            f"PBKDF2 iteration count must be positive, got {iterations}"
        )
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=bytes(salt),
        iterations=iterations,
    )
    return kdf.derive(master_password.encode("utf-8"))


# ---------------------------------------------------------------------------
# Vault encryption
# ---------------------------------------------------------------------------

def encrypt(plaintext: bytes, key: bytes) -> bytes:
    """Encrypt the vault plaintext with AES-256-GCM.

    Format: [iv 12B][encrypted_payload + GCM_tag 16B]

    Args:
        plaintext: Serialized vault contents.
        key: 32-byte key from ``derive_key``.

    Returns:
        Encrypted blob bytes.
    """
    _check_key(key)
    cipher = AESGCM(bytes(key))
    iv = os.urandom(IV_LENGTH)
    ct = cipher.encrypt(iv, plaintext, None)
    return iv + ct


def decrypt(blob: bytes, key: bytes) -> bytes:
    """Decrypt an encrypted vault blob.

    The GCM tag is the only integrity check. Nothing is returned unless it
    verifies.

    Args:
        blob: Blob in format [iv 12B][payload+tag].
        key: 32-byte key from ``derive_key``.

    Returns:
        Decrypted plaintext bytes.

    Raises:
        AuthenticationFailure: Wrong key, or truncated/tampered blob.
    """
    _check_key(key)
    _min = IV_LENGTH + TAG_LENGTH
    if len(blob) < _min:
        raise AuthenticationFailure(
            f"encrypted blob too short: {len(blob)} bytes (minimum {_min})"
        )
    cipher = AESGCM(bytes(key))
    iv = blob[:IV_LENGTH]
    ct = blob[IV_LENGTH:]
    try:
        return cipher.decrypt(iv, ct, None)
    except InvalidTag:
        logger.debug("Vault blob failed GCM tag verification")
        raise AuthenticationFailure(
            "vault authentication tag did not verify"
        ) from None


# ---------------------------------------------------------------------------
# Master password verification
# ---------------------------------------------------------------------------

def hash_master_password(master_password: str, salt: bytes) -> str:
    """Compute the verification hash: base64(SHA-256(password ‖ salt)).

    Raises:
        ConfigurationError: If the salt is not 16 bytes long.
    """
    _check_salt(salt)
    digest = hashes.Hash(hashes.SHA256())
    digest.update(master_password.encode("utf-8"))
    digest.update(bytes(salt))
    return base64.b64encode(digest.finalize()).decode("ascii")


def verify_master_password(
    master_password: str,
    salt: bytes,
    stored_hash: str,
) -> bool:
    """Check a master password against the stored verification hash.

    The comparison runs in constant time with respect to the hash content.
    """
    candidate = hash_master_password(master_password, salt)
    return hmac.compare_digest(
        candidate.encode("ascii"), stored_hash.encode("ascii", "replace"),
    )


# ---------------------------------------------------------------------------
# Storage encoding
# ---------------------------------------------------------------------------

def encode_b64(data: bytes) -> str:
    """Encode binary data (salt, blob) as base64 text for the record."""
    return base64.b64encode(bytes(data)).decode("ascii")


def decode_b64(data: str) -> bytes:
    """Decode base64 text from the record.

    Raises:
        ConfigurationError: If the text is not valid base64.
    """
    try:
        return base64.b64decode(data.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as err:
        raise ConfigurationError(f"invalid base64 data: {err}") from err
