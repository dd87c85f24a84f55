"""SecureVault.

Cryptographic core of a password manager: master password key derivation,
AES-256-GCM vault encryption, auto-locking sessions and TOTP codes.
"""
from .version import __version__
from .exceptions import (
    VaultError,
    ConfigurationError,
    AuthenticationFailure,
    VaultIntegrityError,
    LockedStateError,
    VaultStateError,
    ParseError,
)
from .data import VaultData, Group, Credential
from .vault import (
    VaultConfig,
    VaultRecord,
    VaultSession,
    VaultState,
    AutoLockMonitor,
    VaultWriter,
)
from .totp import TOTPConfig, OTPAuthURI

__all__ = [
    "__version__",
    "VaultError",
    "ConfigurationError",
    "AuthenticationFailure",
    "VaultIntegrityError",
    "LockedStateError",
    "VaultStateError",
    "ParseError",
    "VaultData",
    "Group",
    "Credential",
    "VaultConfig",
    "VaultRecord",
    "VaultSession",
    "VaultState",
    "AutoLockMonitor",
    "VaultWriter",
    "TOTPConfig",
    "OTPAuthURI",
]
