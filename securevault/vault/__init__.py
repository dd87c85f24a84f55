"""Vault — Master password protected, encrypted credential storage.

Security Note (Threat Model):
    While unlocked, the derived vault key is held in process memory and the
    caller holds the decrypted plaintext. A memory dump of the process can
    expose both. Key bytes are overwritten on lock, but Python may have left
    copies behind (e.g. in the PBKDF2 output); this is an accepted limitation.
"""

from .config import VaultConfig
from .record import VaultRecord
from .session_vault import VaultSession, VaultState
from .autolock import AutoLockMonitor
from .writer import VaultWriter

__all__ = [
    "VaultConfig",
    "VaultRecord",
    "VaultSession",
    "VaultState",
    "AutoLockMonitor",
    "VaultWriter",
]
