"""Gateway connection settings loaded from the environment."""

from __future__ import annotations

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from folio_edge.auth import AuthStrategy, strategy_for
from folio_edge.clients import GATEWAY


class GatewaySettings(BaseSettings):
    """Gateway location, tenant, service credentials and transport tuning."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    gateway_url: str | None = Field(default=None, alias="OKAPI_URL")
    tenant: str | None = Field(default=None, alias="OKAPI_TENANT")
    username: str | None = Field(default=None, alias="OKAPI_USER")
    password: SecretStr | None = Field(default=None, alias="OKAPI_PW")
    auth_scheme: str = Field(default="rotating", alias="FOLIO_AUTH_SCHEME")
    timeout_seconds: float = Field(
        default=GATEWAY.timeout_seconds,
        alias="FOLIO_HTTP_TIMEOUT_SECONDS",
        gt=0.0,
    )
    forwarded_for: str = Field(default=GATEWAY.forwarded_for, alias="FOLIO_FORWARDED_FOR")

    @field_validator("auth_scheme")
    @classmethod
    def _known_scheme(cls, value: str) -> str:
        strategy_for(value)
        return value.strip().lower()

    @property
    def auth_strategy(self) -> AuthStrategy:
        return strategy_for(self.auth_scheme)


__all__ = ["GatewaySettings"]
