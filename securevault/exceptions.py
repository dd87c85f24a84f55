"""Exceptions raised by the vault core.

ConfigurationError and LockedStateError are caller bugs. AuthenticationFailure
and ParseError are expected conditions the UI recovers from by re-prompting.
VaultIntegrityError means stored data is corrupted, not that a password was
mistyped.
"""


class VaultError(Exception):
    """Base class for all vault core errors."""


class ConfigurationError(VaultError, ValueError):
    """Malformed input that can only come from a caller bug (bad salt, key or secret)."""


class AuthenticationFailure(VaultError):
    """Wrong key or password, or an authentication tag that does not verify."""


class VaultIntegrityError(VaultError):
    """Stored vault failed to decrypt although the master password matched."""


class LockedStateError(VaultError, RuntimeError):
    """Operation requires an unlocked vault."""


class VaultStateError(VaultError, RuntimeError):
    """Operation is not valid in the current vault lifecycle state."""


class ParseError(VaultError, ValueError):
    """Malformed otpauth URI or Base32 text."""
