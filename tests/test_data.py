"""
Tests for the vault plaintext models.

Tests cover:
- Empty vault serialization
- Credential and group round trips, including TOTP settings
- Unreadable TOTP settings on one credential
- Import/export shape validation
"""
import orjson
import pytest

from securevault.data import Credential, Group, VaultData
from securevault.exceptions import ParseError
from securevault.totp import HashAlgorithm, TOTPConfig


@pytest.fixture
def vault_data():
    group = Group(name="Work")
    return VaultData(
        groups=[group],
        passwords=[
            Credential(
                group_id=group.id,
                title="Git forge",
                username="alice",
                password="s3cret",
                url="https://git.example.com",
                totp=TOTPConfig(secret="JBSWY3DPEHPK3PXP", algorithm="SHA256"),
            ),
            Credential(group_id=group.id, title="Wiki", is_favorite=True),
        ],
    )


class TestSerialization:
    """Tests for to_bytes / from_bytes."""

    def test_empty_vault(self):
        """An empty vault serializes to empty groups and passwords."""
        assert VaultData().to_bytes() == b'{"groups":[],"passwords":[]}'

    def test_roundtrip(self, vault_data):
        restored = VaultData.from_bytes(vault_data.to_bytes())
        assert restored == vault_data
        assert restored.passwords[0].totp.algorithm is HashAlgorithm.SHA256

    def test_camel_case_keys(self, vault_data):
        """Serialized entries use the client's camelCase field names."""
        data = orjson.loads(vault_data.to_bytes())
        entry = data["passwords"][1]
        assert entry["groupId"] == vault_data.groups[0].id
        assert entry["isFavorite"] is True
        assert "createdAt" in entry and "updatedAt" in entry
        assert "url" not in entry

    def test_unknown_fields_survive(self):
        """Fields this version does not know about are kept."""
        raw = orjson.dumps({
            "groups": [{"id": "g1", "name": "Home", "createdAt": "x", "updatedAt": "x", "color": "red"}],
            "passwords": [],
        })
        restored = VaultData.from_bytes(raw)
        assert orjson.loads(restored.to_bytes())["groups"][0]["color"] == "red"

    def test_ids_are_unique(self):
        assert Group(name="a").id != Group(name="a").id

    def test_unreadable_totp_keeps_vault_readable(self, caplog):
        """One credential with a bad TOTP secret does not block the rest."""
        bad_totp = {"secret": "not*base32"}
        raw = orjson.dumps({
            "groups": [],
            "passwords": [
                {"groupId": "g", "title": "broken", "totp": bad_totp},
                {"groupId": "g", "title": "fine", "totp": {"secret": "JBSWY3DPEHPK3PXP"}},
            ],
        })
        restored = VaultData.from_bytes(raw)
        broken, fine = restored.passwords

        assert broken.totp == bad_totp
        assert broken.totp_config is None
        assert isinstance(fine.totp, TOTPConfig)
        assert fine.totp_config.secret == "JBSWY3DPEHPK3PXP"
        assert "unreadable TOTP" in caplog.text
        # written back unchanged
        assert orjson.loads(restored.to_bytes())["passwords"][0]["totp"] == bad_totp

    def test_credential_without_totp(self):
        credential = Credential(group_id="g", title="t")
        assert credential.totp is None
        assert credential.totp_config is None

    @pytest.mark.parametrize("raw", [b"not json", b'{"groups": "nope"}', b"[]"])
    def test_invalid_plaintext(self, raw):
        with pytest.raises(ParseError):
            VaultData.from_bytes(raw)


class TestImportExport:
    """Tests for export_json / import_json."""

    def test_export_import(self, vault_data):
        exported = vault_data.export_json()
        assert b"\n" in exported
        assert VaultData.import_json(exported) == vault_data

    def test_import_from_text(self, vault_data):
        text = vault_data.export_json().decode()
        assert VaultData.import_json(text) == vault_data

    @pytest.mark.parametrize("raw", [
        b'{"groups": []}',
        b'{"passwords": []}',
        b"{}",
    ])
    def test_import_requires_both_keys(self, raw):
        with pytest.raises(ParseError):
            VaultData.import_json(raw)

    @pytest.mark.parametrize("raw", [b"", b"garbage", b"[1, 2]", b'"text"'])
    def test_import_rejects_non_objects(self, raw):
        with pytest.raises(ParseError):
            VaultData.import_json(raw)

    def test_import_rejects_bad_entries(self):
        raw = b'{"groups": [], "passwords": [{"title": "no group"}]}'
        with pytest.raises(ParseError):
            VaultData.import_json(raw)
