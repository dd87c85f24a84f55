"""
Vault Configuration — Validated session and auto-lock settings.

Settings can be read from environment variables:
    VAULT_AUTO_LOCK_TIMEOUT = <seconds>        (default 300)
    VAULT_POLL_INTERVAL = <seconds>            (default 10)
    VAULT_ACTIVITY_INTERVAL = <seconds>        (default 1)
    VAULT_SAVE_DELAY = <seconds>               (default 0.5)
    VAULT_FAST_PASSWORD_CHECK = true|false     (default true)

The PBKDF2 iteration count is not configurable; it is bound to the record
format version (see ``crypto.PBKDF2_ITERATIONS``).
"""
import os
import logging

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger("securevault.vault")

DEFAULT_AUTO_LOCK_TIMEOUT = 5 * 60
DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_ACTIVITY_INTERVAL = 1.0
DEFAULT_SAVE_DELAY = 0.5

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


class VaultConfig(BaseModel):
    """Validated vault configuration."""

    auto_lock_timeout: float = Field(default=DEFAULT_AUTO_LOCK_TIMEOUT, gt=0)
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)
    activity_interval: float = Field(default=DEFAULT_ACTIVITY_INTERVAL, ge=0)
    save_delay: float = Field(default=DEFAULT_SAVE_DELAY, ge=0)
    fast_password_check: bool = Field(default=True)

    @field_validator("fast_password_check", mode="before")
    @classmethod
    def parse_flag(cls, v):
        """Accept the usual textual booleans from environment variables."""
        if isinstance(v, str):
            value = v.strip().lower()
            if value in _TRUE_VALUES:
                return True
            if value in _FALSE_VALUES:
                return False
            raise ValueError(f"Invalid boolean flag: {v!r}")
        return v

    @model_validator(mode="after")
    def validate_poll_interval(self) -> "VaultConfig":
        """Polling slower than the timeout would let sessions outlive it."""
        if self.poll_interval > self.auto_lock_timeout:
            raise ValueError(
                f"poll_interval ({self.poll_interval}s) must not exceed "
                f"auto_lock_timeout ({self.auto_lock_timeout}s)"
            )
        return self

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig by loading values from environment.

        Returns:
            Populated VaultConfig instance.
        """
        env = {
            "auto_lock_timeout": os.environ.get("VAULT_AUTO_LOCK_TIMEOUT"),
            "poll_interval": os.environ.get("VAULT_POLL_INTERVAL"),
            "activity_interval": os.environ.get("VAULT_ACTIVITY_INTERVAL"),
            "save_delay": os.environ.get("VAULT_SAVE_DELAY"),
            "fast_password_check": os.environ.get("VAULT_FAST_PASSWORD_CHECK"),
        }
        values = {k: v for k, v in env.items() if v is not None}
        logger.debug("Vault settings from environment: %s", sorted(values))
        return cls(**values)
