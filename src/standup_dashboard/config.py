"""Client-side configuration.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

No credentials live here. GitHub and Linear secrets are kept in the encrypted local
vault (see :mod:`standup_dashboard.vault`) and are injected per request.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DashboardSettings(BaseSettings):
    """Settings for the CLI and other API consumers.

    Environment variables:
    - STANDUP_API_BASE_URL  (optional)
    - STANDUP_STORAGE_PATH  (optional)
    - STANDUP_USER_ID       (optional)
    - LOG_LEVEL             (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `DashboardSettings(_env_file=path_to_env)`.
    """

    api_base_url: str = Field(
        default="http://127.0.0.1:8000",
        validation_alias="STANDUP_API_BASE_URL",
        description="Base URL of the internal API layer that proxies GitHub and Linear",
    )

    storage_path: Path = Field(
        default=Path(".standup/local_storage.json"),
        validation_alias="STANDUP_STORAGE_PATH",
        description="Local key-value file holding encrypted credential records",
    )

    user_id: str = Field(
        default="",
        validation_alias="STANDUP_USER_ID",
        description=(
            "Identifier the vault key is derived from. When empty, a stable anonymous "
            "key persisted in local storage is used instead."
        ),
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @property
    def api_root(self) -> str:
        return self.api_base_url.rstrip("/")
