"""
Vault Record — The persisted shape of a vault.

    {
        "saltBase64": str,
        "verificationHash": str,
        "encryptedVaultBase64": str,
        "formatVersion": int
    }

Where the record is stored is the caller's concern. Records are immutable;
every change produces a new record so salt, hash and blob always move
together.
"""
from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .crypto import (
    FORMAT_VERSION,
    PBKDF2_ITERATIONS,
    SALT_LENGTH,
    decode_b64,
    encode_b64,
)


class VaultRecord(BaseModel):
    """Salt, verification hash and encrypted blob of one vault."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    salt_base64: str = Field(alias="saltBase64")
    verification_hash: str = Field(alias="verificationHash")
    encrypted_vault_base64: str = Field(alias="encryptedVaultBase64")
    format_version: int = Field(default=FORMAT_VERSION, alias="formatVersion")

    @field_validator("salt_base64")
    @classmethod
    def validate_salt(cls, v: str) -> str:
        """Salt must decode to exactly 16 bytes."""
        if len(decode_b64(v)) != SALT_LENGTH:
            raise ValueError(f"saltBase64 must decode to {SALT_LENGTH} bytes")
        return v

    @field_validator("encrypted_vault_base64")
    @classmethod
    def validate_blob(cls, v: str) -> str:
        decode_b64(v)
        return v

    @field_validator("format_version")
    @classmethod
    def validate_version(cls, v: int) -> int:
        if v not in PBKDF2_ITERATIONS:
            raise ValueError(f"Unsupported vault format version: {v}")
        return v

    @classmethod
    def build(
        cls,
        salt: bytes,
        verification_hash: str,
        blob: bytes,
        format_version: int = FORMAT_VERSION,
    ) -> "VaultRecord":
        """Create a record from raw salt and blob bytes."""
        return cls(
            salt_base64=encode_b64(salt),
            verification_hash=verification_hash,
            encrypted_vault_base64=encode_b64(blob),
            format_version=format_version,
        )

    @property
    def salt(self) -> bytes:
        return decode_b64(self.salt_base64)

    @property
    def blob(self) -> bytes:
        return decode_b64(self.encrypted_vault_base64)

    def with_blob(self, blob: bytes) -> "VaultRecord":
        """Return a copy of this record holding a new encrypted blob."""
        return self.model_copy(
            update={"encrypted_vault_base64": encode_b64(blob)}
        )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    def to_json(self) -> bytes:
        """Serialize the record to JSON bytes (camelCase keys)."""
        return orjson.dumps(self.to_dict())

    @classmethod
    def from_json(cls, data: bytes | str) -> "VaultRecord":
        """Load a record from JSON produced by ``to_json``.

        Raises:
            pydantic.ValidationError: If the record shape is invalid.
            orjson.JSONDecodeError: If the data is not JSON.
        """
        return cls.model_validate(orjson.loads(data))
