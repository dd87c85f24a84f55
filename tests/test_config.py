"""Tests for VaultConfig."""
import pytest
from pydantic import ValidationError

from securevault.vault import VaultConfig


class TestVaultConfig:
    """Tests for defaults, validation and environment loading."""

    def test_defaults(self):
        config = VaultConfig()
        assert config.auto_lock_timeout == 300
        assert config.poll_interval == 10
        assert config.activity_interval == 1
        assert config.save_delay == 0.5
        assert config.fast_password_check is True

    @pytest.mark.parametrize("field,value", [
        ("auto_lock_timeout", 0),
        ("poll_interval", -1),
        ("activity_interval", -0.1),
        ("save_delay", -1),
        ("fast_password_check", "maybe"),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            VaultConfig(**{field: value})

    def test_poll_interval_must_not_exceed_timeout(self):
        with pytest.raises(ValidationError):
            VaultConfig(auto_lock_timeout=5, poll_interval=10)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("VAULT_AUTO_LOCK_TIMEOUT", "60")
        monkeypatch.setenv("VAULT_POLL_INTERVAL", "5")
        monkeypatch.setenv("VAULT_FAST_PASSWORD_CHECK", "off")
        monkeypatch.delenv("VAULT_SAVE_DELAY", raising=False)
        monkeypatch.delenv("VAULT_ACTIVITY_INTERVAL", raising=False)
        config = VaultConfig.from_env()
        assert config.auto_lock_timeout == 60
        assert config.poll_interval == 5
        assert config.fast_password_check is False
        assert config.save_delay == 0.5

    def test_from_env_defaults(self, monkeypatch):
        for name in (
            "VAULT_AUTO_LOCK_TIMEOUT",
            "VAULT_POLL_INTERVAL",
            "VAULT_ACTIVITY_INTERVAL",
            "VAULT_SAVE_DELAY",
            "VAULT_FAST_PASSWORD_CHECK",
        ):
            monkeypatch.delenv(name, raising=False)
        assert VaultConfig.from_env() == VaultConfig()
