"""Tests for configuration."""

from opsdesk.core.config import Constants, Settings


def test_defaults(monkeypatch) -> None:
    """Test settings fall back to defaults when the environment is empty."""
    monkeypatch.delenv("SQLITE_DB_PATH", raising=False)
    monkeypatch.delenv("LOGFIRE_TOKEN", raising=False)

    settings = Settings(_env_file=None)

    assert settings.sqlite_db_path == "data/opsdesk.db"
    assert settings.logfire_token is None
    assert settings.service_name == "opsdesk"


def test_environment_overrides(monkeypatch) -> None:
    """Test environment variables are read case-insensitively."""
    monkeypatch.setenv("sqlite_db_path", "/tmp/other.db")

    settings = Settings(_env_file=None)

    assert settings.sqlite_db_path == "/tmp/other.db"


def test_constants() -> None:
    assert Constants.MIN_TITLE_LENGTH == 3
    assert Constants.DEFAULT_PER_PAGE_LIMIT <= Constants.MAX_PER_PAGE_LIMIT
