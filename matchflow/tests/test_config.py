"""Tests for settings loading."""

from __future__ import annotations

import pytest

from matchflow.config import Settings, load_settings


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MATCHFLOW_DB_PATH", "/tmp/matches.db")
    monkeypatch.setenv("MATCHFLOW_BUSY_TIMEOUT", "2.5")
    monkeypatch.setenv("MATCHFLOW_API_PORT", "9001")
    monkeypatch.setenv("MATCHFLOW_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.db_path == "/tmp/matches.db"
    assert settings.busy_timeout == 2.5
    assert settings.api_port == 9001
    assert settings.log_level == "debug"


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "MATCHFLOW_DB_PATH",
        "MATCHFLOW_BUSY_TIMEOUT",
        "MATCHFLOW_LOG_LEVEL",
        "MATCHFLOW_API_HOST",
        "MATCHFLOW_API_PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    assert load_settings() == Settings()


@pytest.mark.parametrize(
    "settings",
    [
        Settings(db_path=" "),
        Settings(busy_timeout=0),
        Settings(api_port=70000),
        Settings(log_level="loud"),
    ],
)
def test_validate_rejects(settings: Settings) -> None:
    with pytest.raises(ValueError):
        settings.validate()
