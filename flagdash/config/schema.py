from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_BASE_URL = "https://flagdash.io"


class KeyTier(str, Enum):
    """Coarse permission tier of the current credential.

    Only gates key bindings in the UI; the API enforces real authority.
    """

    MANAGEMENT = "management"
    SERVER = "server"
    CLIENT = "client"
    SESSION = "session"
    UNKNOWN = "unknown"

    @classmethod
    def from_key(cls, key: str) -> "KeyTier":
        """Derive tier from the structural prefix of a token."""
        for prefix, tier in (
            ("management_", cls.MANAGEMENT),
            ("server_", cls.SERVER),
            ("client_", cls.CLIENT),
            ("session_", cls.SESSION),
        ):
            if key.startswith(prefix):
                return tier
        return cls.UNKNOWN

    @classmethod
    def from_role(cls, role: str) -> "KeyTier":
        """Derive tier from a server-reported user role."""
        normalized = role.strip().lower()
        if normalized in ("owner", "admin"):
            return cls.MANAGEMENT
        if normalized in ("member", "editor"):
            return cls.SERVER
        if normalized == "viewer":
            return cls.CLIENT
        return cls.SESSION

    def can_mutate(self) -> bool:
        return self in (KeyTier.MANAGEMENT, KeyTier.SESSION)


class AuthConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    session_token: str = ""
    user_name: str = ""
    user_email: str = ""
    user_role: str = ""
    token_expires_at: str = ""
    # Legacy field, migrated into session_token on load and never written back.
    api_key: Optional[str] = Field(default=None, exclude=True)


class ConnectionConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    base_url: str = DEFAULT_BASE_URL

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and strip trailing slashes."""
        v = v.strip()
        if not v:
            return DEFAULT_BASE_URL
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid base_url: {v}. Expected an http:// or https:// URL")
        return v.rstrip("/")


class DefaultsConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    project_id: str = ""
    environment_id: str = ""
    project_name: str = ""
    environment_name: str = ""


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    auth: AuthConfig = Field(default_factory=AuthConfig)
    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)

    @model_validator(mode="after")
    def migrate_legacy_api_key(self) -> "AppConfig":
        if self.auth.api_key and not self.auth.session_token:
            self.auth.session_token = self.auth.api_key
        self.auth.api_key = None
        return self

    def has_session_token(self) -> bool:
        return bool(self.auth.session_token)

    def user_role_tier(self) -> KeyTier:
        """Prefer the server-reported role; fall back to the token prefix."""
        if self.auth.user_role:
            return KeyTier.from_role(self.auth.user_role)
        return KeyTier.from_key(self.auth.session_token)

    def clear_auth(self) -> None:
        self.auth = AuthConfig()
