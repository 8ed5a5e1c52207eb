"""Configuration for the internal API server.

The server holds no credentials of its own. GitHub and Linear secrets arrive on each
request in the ``x-github-token`` / ``x-linear-api-key`` / ``x-github-org`` headers,
so endpoints validate them at request time.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    github_base_url: str = Field(
        default="https://api.github.com", validation_alias="GITHUB_BASE_URL"
    )
    linear_api_url: str = Field(
        default="https://api.linear.app/graphql", validation_alias="LINEAR_API_URL"
    )

    request_timeout_seconds: float = Field(
        default=30.0,
        validation_alias="STANDUP_REQUEST_TIMEOUT_SECONDS",
        description="Timeout applied to every outbound GitHub/Linear request.",
        gt=0,
    )

    cors_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        validation_alias="STANDUP_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
