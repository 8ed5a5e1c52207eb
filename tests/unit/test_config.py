"""Unit tests for settings and logging configuration."""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from standup_dashboard.config import DashboardSettings
from standup_dashboard.logging import REDACTED, JsonFormatter, configure_logging
from standup_dashboard.server.config import ServerSettings


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in (
        "STANDUP_API_BASE_URL",
        "STANDUP_STORAGE_PATH",
        "STANDUP_USER_ID",
        "LOG_LEVEL",
        "STANDUP_CORS_ORIGINS",
        "STANDUP_REQUEST_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)


def test_dashboard_settings_defaults() -> None:
    settings = DashboardSettings()

    assert settings.api_root == "http://127.0.0.1:8000"
    assert settings.storage_path == Path(".standup/local_storage.json")
    assert settings.user_id == ""
    assert settings.log_level == "INFO"


def test_dashboard_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("STANDUP_API_BASE_URL", "https://standup.internal/")
    monkeypatch.setenv("STANDUP_STORAGE_PATH", "/tmp/standup.json")
    monkeypatch.setenv("STANDUP_USER_ID", "user_123")

    settings = DashboardSettings()

    assert settings.api_root == "https://standup.internal"
    assert settings.storage_path == Path("/tmp/standup.json")
    assert settings.user_id == "user_123"


def test_dashboard_settings_from_env_file(tmp_path: Path) -> None:
    env_file = tmp_path / "custom.env"
    env_file.write_text("STANDUP_USER_ID=from-file\nLOG_LEVEL=DEBUG\n", encoding="utf-8")

    settings = DashboardSettings(_env_file=env_file)

    assert settings.user_id == "from-file"
    assert settings.log_level == "DEBUG"


def test_server_settings_parse_cors_origins(monkeypatch) -> None:
    monkeypatch.setenv("STANDUP_CORS_ORIGINS", " https://a.example , ,https://b.example")

    assert ServerSettings().parsed_cors_origins() == ["https://a.example", "https://b.example"]


def test_server_settings_reject_non_positive_timeout(monkeypatch) -> None:
    monkeypatch.setenv("STANDUP_REQUEST_TIMEOUT_SECONDS", "0")

    with pytest.raises(ValidationError):
        ServerSettings()


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        name="standup_dashboard.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Member filter updated",
        args=(),
        exc_info=None,
    )
    record.member_id = "u1"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["message"] == "Member filter updated"
    assert payload["extra"] == {"member_id": "u1"}


def test_json_formatter_redacts_credentials() -> None:
    record = logging.LogRecord(
        name="standup_dashboard.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Calling API",
        args=(),
        exc_info=None,
    )
    record.headers = {"x-github-token": "ghp_secret", "x-github-org": "acme"}
    record.token = "lin_secret"

    rendered = JsonFormatter().format(record)
    payload = json.loads(rendered)

    assert "ghp_secret" not in rendered
    assert "lin_secret" not in rendered
    assert payload["extra"]["headers"] == {"x-github-token": REDACTED, "x-github-org": "acme"}
    assert payload["extra"]["token"] == REDACTED


def test_configure_logging_replaces_handlers() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    stream = io.StringIO()
    try:
        configure_logging("debug", stream=stream)
        configure_logging("info", stream=stream)
        logging.getLogger("standup_dashboard.test").info("hello", extra={"team_id": "t1"})

        lines = stream.getvalue().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["extra"] == {"team_id": "t1"}
        assert logging.getLogger("github").level == logging.INFO
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
