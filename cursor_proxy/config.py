"""Runtime settings for the Cursor FastAPI proxy."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

TOOL_MODES = ("native", "prompt")
CREDENTIAL_SOURCES = ("header", "sqlite", "cli")


class ProxySettings(BaseSettings):
    """Runtime configuration values, read from ``CURSOR_PROXY_*`` variables.

    ``PORT``, ``CURSOR_CLIENT_VERSION``, ``CURSOR_TIMEZONE`` and ``CURSOR_CLI``
    are still honoured for older deployments.
    """

    model_config = SettingsConfigDict(
        env_prefix="CURSOR_PROXY_",
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
    )

    host: Optional[str] = None
    port: Optional[int] = Field(default=None, validation_alias=AliasChoices("CURSOR_PROXY_PORT", "PORT"))
    upstream_base_url: str = "https://api2.cursor.sh"
    client_version: str = Field(
        default="1.1.3",
        validation_alias=AliasChoices("CURSOR_PROXY_CLIENT_VERSION", "CURSOR_CLIENT_VERSION"),
    )
    timezone: str = Field(
        default="Asia/Shanghai",
        validation_alias=AliasChoices("CURSOR_PROXY_TIMEZONE", "CURSOR_TIMEZONE"),
    )
    outbound_proxy: Optional[str] = None
    connect_timeout: float = 5.0
    read_timeout: float = 30.0
    tool_mode: Literal["native", "prompt"] = "native"
    thinking_open: str = "<thinking>"
    thinking_close: str = "</thinking>"
    credential_source: Literal["header", "sqlite", "cli"] = "header"
    cursor_cli: bool = Field(default=False, validation_alias=AliasChoices("CURSOR_PROXY_CLI", "CURSOR_CLI"))
    token_cache_ttl: float = 60.0
    debug_sse_enabled: bool = False
    debug_sse_path: Optional[str] = None

    @field_validator("tool_mode", "credential_source", mode="before")
    @classmethod
    def _lower(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("upstream_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def _apply_legacy_switches(self) -> "ProxySettings":
        # CURSOR_CLI=true predates credential_source
        if self.cursor_cli and "credential_source" not in self.model_fields_set:
            self.credential_source = "cli"
        if self.debug_sse_path and "debug_sse_enabled" not in self.model_fields_set:
            self.debug_sse_enabled = True
        return self
