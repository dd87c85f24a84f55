"""
VaultSession — Master password lifecycle of one vault.

States::

    UNINITIALIZED --create_vault--> UNLOCKED
    LOCKED <--lock_vault / auto-lock-- UNLOCKED
    LOCKED --unlock_vault--> UNLOCKED
    any --reset_vault--> UNINITIALIZED

Provides the public API of the vault core:
- ``create_vault(password)`` — seal an empty vault and unlock it
- ``unlock_vault(password)`` — authenticate and return the plaintext
- ``lock_vault()`` — wipe key material
- ``save_vault(plaintext)`` — re-encrypt under the session key
- ``change_master_password(current, new)`` — re-key salt, hash and blob together
- ``reset_vault()`` — forget everything ("forgot password" recovery)

A VaultSession is constructed explicitly and passed to whoever needs it.
Saves are not locked internally; callers serialize them (see ``VaultWriter``).

Security Note:
    Never log passwords, keys or plaintext values. The derived key lives in a
    bytearray owned by the unlocked session and is overwritten on lock.
"""
import time
import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from ..data import VaultData
from ..exceptions import ConfigurationError, LockedStateError, VaultStateError
from .config import VaultConfig
from .crypto import encrypt
from .key_rotation import open_record, rekey_record, seal_record, wipe
from .record import VaultRecord

logger = logging.getLogger("securevault.vault")


class VaultState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOCKED = "locked"
    UNLOCKED = "unlocked"


class UnlockedSession:
    """Key material and activity clock of an unlocked vault. Never persisted."""

    __slots__ = ("key", "salt", "last_activity")

    def __init__(self, key: bytearray, salt: bytes, now: float):
        self.key = key
        self.salt = salt
        self.last_activity = now

    def touch(self, now: float) -> None:
        # clock adjustments never move activity backwards
        if now > self.last_activity:
            self.last_activity = now

    def wipe(self) -> None:
        wipe(self.key)
        self.salt = b""


class VaultSession:
    """Owns a vault record and, while unlocked, its derived key.

    Cryptographic work runs in a worker thread so the event loop stays
    responsive during PBKDF2. Each operation is still a single
    request/response call.
    """

    def __init__(
        self,
        record: Optional[VaultRecord] = None,
        config: Optional[VaultConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._record = record
        self._config = config or VaultConfig()
        self._clock = clock
        self._session: Optional[UnlockedSession] = None
        self._auto_lock_timeout = self._config.auto_lock_timeout

    def __repr__(self) -> str:
        return f"<VaultSession [state:{self.state.value}]>"

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> VaultState:
        if self._record is None:
            return VaultState.UNINITIALIZED
        if self._session is None:
            return VaultState.LOCKED
        return VaultState.UNLOCKED

    @property
    def is_unlocked(self) -> bool:
        return self._session is not None

    @property
    def record(self) -> Optional[VaultRecord]:
        """The current persisted record, or None when uninitialized."""
        return self._record

    @property
    def config(self) -> VaultConfig:
        return self._config

    @property
    def clock(self) -> Callable[[], float]:
        return self._clock

    @property
    def last_activity(self) -> Optional[float]:
        return self._session.last_activity if self._session else None

    @property
    def auto_lock_timeout(self) -> float:
        return self._auto_lock_timeout

    @auto_lock_timeout.setter
    def auto_lock_timeout(self, value: float) -> None:
        if value <= 0:
            raise ConfigurationError(
                f"auto_lock_timeout must be positive, got {value}"
            )
        self._auto_lock_timeout = value

    # ------------------------------------------------------------------
    # Session helpers
    # ------------------------------------------------------------------

    def _open_session(self, key: bytearray, salt: bytes) -> None:
        if self._session is not None:
            self._session.wipe()
        self._session = UnlockedSession(key, salt, self._clock())

    def _require_session(self) -> UnlockedSession:
        if self._session is None:
            raise LockedStateError("Vault is locked")
        return self._session

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create_vault(self, master_password: str) -> None:
        """Create a new empty vault and unlock it.

        Raises:
            VaultStateError: If a vault already exists (reset it first).
        """
        if self._record is not None:
            raise VaultStateError("A vault already exists; reset it first")
        plaintext = VaultData().to_bytes()
        record, key = await asyncio.to_thread(seal_record, plaintext, master_password)
        if self._record is not None:
            wipe(key)
            raise VaultStateError("A vault was created concurrently")
        self._record = record
        self._open_session(key, record.salt)
        logger.info("Vault created")

    async def unlock_vault(self, master_password: str) -> Optional[bytes]:
        """Unlock the vault.

        Returns:
            The decrypted vault plaintext, or None if there is no vault or
            the password is wrong. Nothing is mutated on failure.

        Raises:
            VaultIntegrityError: If the password matched but the stored
                blob failed to decrypt (corrupted storage).
        """
        record = self._record
        if record is None:
            logger.warning("Unlock attempted with no vault created")
            return None
        opened = await asyncio.to_thread(
            open_record, record, master_password, self._config.fast_password_check,
        )
        if opened is None:
            logger.warning("Vault unlock failed: incorrect master password")
            return None
        plaintext, key = opened
        if self._record is not record:
            wipe(key)
            raise VaultStateError("Vault record changed during unlock")
        self._open_session(key, record.salt)
        logger.info("Vault unlocked")
        return plaintext

    def lock_vault(self) -> None:
        """Wipe the session key and lock. Safe to call when already locked."""
        session, self._session = self._session, None
        if session is not None:
            session.wipe()
            logger.info("Vault locked")

    async def save_vault(self, plaintext: bytes) -> VaultRecord:
        """Re-encrypt the vault plaintext under the session key.

        Returns:
            The new record, which replaces the current one.

        Raises:
            LockedStateError: If the vault is locked, or gets locked or
                re-keyed while the save is in flight.
        """
        session = self._require_session()
        record = self._record
        blob = await asyncio.to_thread(encrypt, plaintext, session.key)
        if self._session is not session or self._record is not record:
            raise LockedStateError("Vault was locked or re-keyed during save")
        self._record = record.with_blob(blob)
        session.touch(self._clock())
        logger.debug("Vault saved (%d bytes)", len(blob))
        return self._record

    async def change_master_password(
        self,
        current_password: str,
        new_password: str,
    ) -> bool:
        """Re-key the vault under a new master password.

        A new salt, verification hash and blob are staged and committed
        together. An unlocked session switches to the new key; a locked
        vault stays locked.

        Returns:
            True on success, False if there is no vault or
            ``current_password`` is wrong.

        Raises:
            VaultIntegrityError: If the stored blob is corrupted.
        """
        record = self._record
        if record is None:
            return False
        staged = await asyncio.to_thread(
            rekey_record,
            record,
            current_password,
            new_password,
            self._config.fast_password_check,
        )
        if staged is None:
            logger.warning("Master password change rejected: incorrect password")
            return False
        new_record, new_key, _ = staged
        if self._record is not record:
            wipe(new_key)
            raise VaultStateError("Vault record changed during password change")
        self._record = new_record
        if self._session is not None:
            self._open_session(new_key, new_record.salt)
        else:
            wipe(new_key)
        logger.info("Master password changed")
        return True

    def reset_vault(self) -> None:
        """Destroy the vault record and session. Irreversible."""
        self.lock_vault()
        self._record = None
        logger.warning("Vault reset")

    # ------------------------------------------------------------------
    # Activity
    # ------------------------------------------------------------------

    def touch(self, now: Optional[float] = None) -> None:
        """Record user activity. Ignored while locked."""
        if self._session is not None:
            self._session.touch(self._clock() if now is None else now)

    def check_auto_lock(self, now: Optional[float] = None) -> bool:
        """Lock if the session has been idle longer than the timeout.

        Elapsed time is measured on the wall clock, so time spent suspended
        counts as inactivity.

        Returns:
            True if this call locked the vault.
        """
        session = self._session
        if session is None:
            return False
        now = self._clock() if now is None else now
        idle = now - session.last_activity
        if idle > self._auto_lock_timeout:
            logger.info("Vault auto-locked after %.0fs of inactivity", idle)
            self.lock_vault()
            return True
        return False
