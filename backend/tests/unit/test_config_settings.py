"""Unit tests for application settings configuration."""

from pathlib import Path

from carelog.config import Settings


def test_settings_uses_backend_env_file_independent_of_cwd():
    """Settings should always include backend/.env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_backend_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_backend_env in normalized
    assert str(Path(".env")) in normalized


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("EXPORT_BATCH_SIZE", "250")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///tmp/other.db")

    settings = Settings()

    assert settings.export_batch_size == 250
    assert settings.database_url == "sqlite:///tmp/other.db"
    assert settings.report_top_clients == 15
