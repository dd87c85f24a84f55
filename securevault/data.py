"""Vault plaintext: the groups and credentials kept inside the encrypted blob.

The vault core itself treats the plaintext as opaque bytes. These models give
callers a typed view of it and the JSON encoding used for import/export.
"""
import uuid
import logging
from typing import Any, Optional, Union
from datetime import datetime, timezone

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ParseError
from .totp.engine import TOTPConfig

logger = logging.getLogger("securevault.vault")


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class _Entry(BaseModel):
    # unknown fields written by newer clients survive a load/save cycle
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(default_factory=_new_id)
    created_at: str = Field(default_factory=_now, alias="createdAt")
    updated_at: str = Field(default_factory=_now, alias="updatedAt")


class Group(_Entry):
    """A named folder of credentials."""

    name: str
    icon: Optional[str] = None


class Credential(_Entry):
    """A stored login, optionally with a TOTP second factor."""

    group_id: str = Field(alias="groupId")
    title: str
    username: str = ""
    password: str = ""
    url: Optional[str] = None
    notes: Optional[str] = None
    is_favorite: bool = Field(default=False, alias="isFavorite")
    # unreadable TOTP settings stay as the raw mapping so the rest of the
    # vault still loads and the entry is written back unchanged
    totp: Optional[Union[TOTPConfig, dict[str, Any]]] = Field(
        default=None, union_mode="left_to_right",
    )

    @field_validator("totp", mode="after")
    @classmethod
    def keep_unreadable_totp(cls, v):
        if isinstance(v, dict):
            logger.warning("Credential has unreadable TOTP settings; kept as-is")
        return v

    @property
    def totp_config(self) -> Optional[TOTPConfig]:
        """The TOTP settings, or None if absent or unreadable."""
        return self.totp if isinstance(self.totp, TOTPConfig) else None


class VaultData(BaseModel):
    """The full decrypted vault: ``{"groups": [...], "passwords": [...]}``."""

    model_config = ConfigDict(populate_by_name=True)

    groups: list[Group] = Field(default_factory=list)
    passwords: list[Credential] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)

    def to_bytes(self) -> bytes:
        """Serialize to the plaintext bytes handed to the vault session."""
        return orjson.dumps(self.to_dict())

    @classmethod
    def from_bytes(cls, data: bytes) -> "VaultData":
        """Load plaintext bytes returned by an unlock.

        Raises:
            ParseError: If the bytes are not a valid vault document.
        """
        try:
            return cls.model_validate(orjson.loads(data))
        except (orjson.JSONDecodeError, ValidationError) as err:
            raise ParseError(f"invalid vault plaintext: {err}") from err

    def export_json(self) -> bytes:
        """Human-readable JSON for a downloadable backup file."""
        return orjson.dumps(self.to_dict(), option=orjson.OPT_INDENT_2)

    @classmethod
    def import_json(cls, data: bytes | str) -> "VaultData":
        """Load a backup file produced by ``export_json``.

        Both ``groups`` and ``passwords`` keys must be present.

        Raises:
            ParseError: If the file is not JSON or has the wrong shape.
        """
        try:
            parsed = orjson.loads(data)
        except orjson.JSONDecodeError as err:
            raise ParseError(f"import file is not valid JSON: {err}") from err
        if not isinstance(parsed, dict):
            raise ParseError("import file must contain a JSON object")
        missing = [key for key in ("groups", "passwords") if key not in parsed]
        if missing:
            raise ParseError(f"import file is missing: {', '.join(missing)}")
        try:
            return cls.model_validate(parsed)
        except ValidationError as err:
            raise ParseError(f"invalid import file: {err}") from err
