"""Keyed hashing (HMAC) over SHA-1, SHA-256 and SHA-512."""
from enum import Enum

from cryptography.hazmat.primitives import hashes, hmac


class HashAlgorithm(str, Enum):
    """Hash functions accepted for TOTP, named as in otpauth URIs."""

    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    def hash(self) -> hashes.HashAlgorithm:
        return _HASHES[self]()


_HASHES = {
    HashAlgorithm.SHA1: hashes.SHA1,
    HashAlgorithm.SHA256: hashes.SHA256,
    HashAlgorithm.SHA512: hashes.SHA512,
}


def hmac_digest(
    key: bytes,
    message: bytes,
    algorithm: HashAlgorithm = HashAlgorithm.SHA1,
) -> bytes:
    """Compute HMAC(key, message) with the given hash algorithm.

    Args:
        key: Raw key bytes (for TOTP, the decoded Base32 secret).
        message: Data to authenticate.
        algorithm: Hash function to use.

    Returns:
        The MAC: 20, 32 or 64 bytes depending on the algorithm.
    """
    mac = hmac.HMAC(key, HashAlgorithm(algorithm).hash())
    mac.update(message)
    return mac.finalize()
