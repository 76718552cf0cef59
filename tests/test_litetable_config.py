"""Tests for configuration management."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from litetable import Database, Environment, Settings, TransactionMode, load_settings
from litetable.database import DatabaseConfig, resolve_database_path


def test_environment_values() -> None:
    """Test environment enum values."""
    assert Environment.DEVELOPMENT == "development"
    assert Environment.PRODUCTION == "production"
    assert Environment.TESTING == "testing"


def test_default_settings() -> None:
    """Test default settings values."""
    with patch.dict(os.environ, {}, clear=True):
        settings = Settings()

        assert settings.environment == Environment.DEVELOPMENT
        assert settings.log_level == "INFO"
        assert settings.log_sql is False
        assert settings.database_path is None
        assert settings.trust_backing_database is False
        assert settings.busy_timeout_ms == 60000
        assert settings.journal_mode == "DELETE"
        assert settings.transaction_mode == TransactionMode.DEFERRED


def test_testing_mode_uses_memory_database() -> None:
    """Test that the testing environment defaults to an in-memory database."""
    settings = Settings(environment=Environment.TESTING)

    assert settings.is_testing is True
    assert settings.is_development is False
    assert settings.is_production is False
    assert settings.database_path == ":memory:"


def test_load_settings_from_environment() -> None:
    """Test reading settings from LITETABLE_* variables."""
    env = {
        "LITETABLE_ENV": "production",
        "LITETABLE_LOG_LEVEL": "debug",
        "LITETABLE_LOG_SQL": "yes",
        "LITETABLE_DATABASE_PATH": "/tmp/litetable-test.db",
        "LITETABLE_TRUST_BACKING_DATABASE": "true",
        "LITETABLE_BUSY_TIMEOUT_MS": "250",
        "LITETABLE_JOURNAL_MODE": "wal",
        "LITETABLE_TRANSACTION_MODE": "immediate",
    }
    with patch.dict(os.environ, env, clear=True):
        settings = load_settings()

    assert settings.is_production is True
    assert settings.log_level == "DEBUG"
    assert settings.log_sql is True
    assert settings.database_path == "/tmp/litetable-test.db"
    assert settings.trust_backing_database is True
    assert settings.busy_timeout_ms == 250
    assert settings.journal_mode == "WAL"
    assert settings.transaction_mode == TransactionMode.IMMEDIATE


def test_invalid_settings() -> None:
    """Test that invalid values are rejected."""
    with pytest.raises(ValidationError):
        Settings(journal_mode="sideways")
    with pytest.raises(ValidationError):
        Settings(busy_timeout_ms=-1)
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")
    assert Settings(log_level=" warning ").log_level == "WARNING"


def test_database_config_paths(tmp_path: Path) -> None:
    """Test per-environment database locations."""
    assert DatabaseConfig(Environment.TESTING).database_path == ":memory:"
    assert DatabaseConfig(Environment.DEVELOPMENT, tmp_path).database_path == str(
        tmp_path / "db" / "litetable.dev.db"
    )
    assert DatabaseConfig(Environment.PRODUCTION, tmp_path).database_path == str(
        tmp_path / "db" / "litetable.db"
    )


def test_resolve_database_path_prefers_explicit_path(tmp_path: Path) -> None:
    """Test that an explicit path wins over the environment default."""
    path = tmp_path / "custom.db"
    assert resolve_database_path(Environment.PRODUCTION, path) == str(path)
    assert resolve_database_path(Environment.TESTING) == ":memory:"


def test_database_from_settings(temp_db_path: Path) -> None:
    """Test building a database from settings."""
    settings = Settings(
        database_path=str(temp_db_path), trust_backing_database=True
    )
    with Database.from_settings(settings) as db:
        assert db.path == str(temp_db_path)
        assert db.trust_backing_database is True

    with Database.from_settings(
        Settings(environment=Environment.TESTING), trust_backing_database=True
    ) as db:
        assert db.path == ":memory:"
        assert db.trust_backing_database is True
