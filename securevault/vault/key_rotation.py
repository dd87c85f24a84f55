"""
Vault Key Rotation — Re-encrypt a vault under a new master password.

Salt, verification hash and encrypted blob are staged together into a new
record. The staged record is only returned after its blob has been
decrypted again with the new key and matched against the original
plaintext, so a caller that commits it can never end up with an old salt
next to a new blob.

Security Note:
    Plaintext exists in memory only during re-encryption.
    Never log passwords, keys or plaintext values.
"""
import hmac
import logging
from typing import Optional

from ..exceptions import (
    AuthenticationFailure,
    VaultIntegrityError,
)
from .crypto import (
    FORMAT_VERSION,
    decrypt,
    derive_key,
    encrypt,
    generate_salt,
    hash_master_password,
    iterations_for,
    verify_master_password,
)
from .record import VaultRecord

logger = logging.getLogger("securevault.vault")


def wipe(buffer: Optional[bytearray]) -> None:
    """Overwrite key material in place."""
    if buffer is not None:
        buffer[:] = bytes(len(buffer))


def open_record(
    record: VaultRecord,
    master_password: str,
    fast_password_check: bool = True,
) -> Optional[tuple[bytes, bytearray]]:
    """Authenticate a master password and decrypt the record's blob.

    Args:
        record: Persisted vault record.
        master_password: Candidate master password.
        fast_password_check: Check the verification hash before deriving
            the key. When False the AEAD tag alone decides.

    Returns:
        Tuple of (plaintext, key) or None if the password is wrong. The key
        is a bytearray the caller must wipe.

    Raises:
        VaultIntegrityError: If the verification hash matched but the blob
            failed to decrypt.
    """
    salt = record.salt
    if fast_password_check and not verify_master_password(
        master_password, salt, record.verification_hash,
    ):
        return None

    key = bytearray(
        derive_key(master_password, salt, iterations_for(record.format_version))
    )
    try:
        plaintext = decrypt(record.blob, key)
    except AuthenticationFailure as err:
        wipe(key)
        if not fast_password_check:
            return None
        logger.error("Vault blob failed authentication after password match")
        raise VaultIntegrityError(
            "stored vault is corrupted: decryption failed for a verified password"
        ) from err
    return plaintext, key


def seal_record(
    plaintext: bytes,
    master_password: str,
) -> tuple[VaultRecord, bytearray]:
    """Create a fresh record (new salt, hash and blob) for a plaintext.

    Returns:
        Tuple of (record, key). The key is a bytearray the caller must wipe.
    """
    salt = generate_salt()
    verification_hash = hash_master_password(master_password, salt)
    key = bytearray(
        derive_key(master_password, salt, iterations_for(FORMAT_VERSION))
    )
    try:
        blob = encrypt(plaintext, key)
    except Exception:
        wipe(key)
        raise
    record = VaultRecord.build(salt, verification_hash, blob, FORMAT_VERSION)
    return record, key


def rekey_record(
    record: VaultRecord,
    current_password: str,
    new_password: str,
    fast_password_check: bool = True,
) -> Optional[tuple[VaultRecord, bytearray, bytes]]:
    """Stage a record re-encrypted under ``new_password``.

    Args:
        record: Current persisted vault record.
        current_password: Master password the record was sealed with.
        new_password: Replacement master password.
        fast_password_check: See ``open_record``.

    Returns:
        Tuple of (new_record, new_key, plaintext), or None if
        ``current_password`` is wrong.

    Raises:
        VaultIntegrityError: If the current blob is corrupted, or if the
            staged blob does not decrypt back to the original plaintext.
    """
    opened = open_record(record, current_password, fast_password_check)
    if opened is None:
        return None
    plaintext, old_key = opened
    wipe(old_key)

    new_record, new_key = seal_record(plaintext, new_password)
    try:
        roundtrip = decrypt(new_record.blob, new_key)
    except AuthenticationFailure as err:
        wipe(new_key)
        raise VaultIntegrityError("re-encrypted vault failed verification") from err
    if not hmac.compare_digest(roundtrip, plaintext):
        wipe(new_key)
        raise VaultIntegrityError("re-encrypted vault does not match original")

    logger.debug(
        "Vault re-keyed (format v%d → v%d)",
        record.format_version, new_record.format_version,
    )
    return new_record, new_key, plaintext
