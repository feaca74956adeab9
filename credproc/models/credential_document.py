from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class CredentialDocument(BaseModel):
    """
    Temporary credentials in the shape a credential_process consumer expects.
    The same document is printed to stdout and persisted to the cache file.
    """

    model_config = ConfigDict(populate_by_name=True)

    version: int = Field(default=1, alias="Version")
    access_key_id: Optional[str] = Field(default=None, alias="AccessKeyId")
    secret_access_key: Optional[str] = Field(default=None, alias="SecretAccessKey")
    session_token: Optional[str] = Field(default=None, alias="SessionToken")
    expiration: Optional[datetime] = Field(default=None, alias="Expiration")

    @field_validator("expiration")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @field_serializer("expiration")
    def _rfc3339(self, value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        return value.isoformat().replace("+00:00", "Z")

    @classmethod
    def from_sts(cls, credentials: Mapping[str, Any]) -> "CredentialDocument":
        return cls(
            version=1,
            access_key_id=credentials["AccessKeyId"],
            secret_access_key=credentials["SecretAccessKey"],
            session_token=credentials["SessionToken"],
            expiration=credentials["Expiration"],
        )

    @property
    def is_complete(self) -> bool:
        return None not in (
            self.access_key_id,
            self.secret_access_key,
            self.session_token,
            self.expiration,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
