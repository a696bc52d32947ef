"""Unit tests for application settings configuration."""

from pathlib import Path

from task_search.config import Settings
from task_search.domain.entities import SearchConfig
from task_search.infrastructure.dependencies import search_config_from_settings


def test_settings_uses_backend_env_file_independent_of_cwd():
    """Settings should always include backend/.env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_backend_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_backend_env in normalized
    assert str(Path(".env")) in normalized


def test_default_data_files_live_in_backend_data():
    settings = Settings()
    data_dir = Path(__file__).resolve().parents[2] / "data"

    assert Path(settings.lexicon_file) == data_dir / "lexicon.yaml"
    assert Path(settings.tasks_file) == data_dir / "tasks.json"


def test_search_defaults_match_engine_defaults():
    """Unconfigured settings must produce the engine's built-in thresholds."""
    config = search_config_from_settings(Settings())
    assert config == SearchConfig()


def test_search_thresholds_read_from_environment(monkeypatch):
    monkeypatch.setenv("SEARCH_MIN_SCORE", "0.4")
    monkeypatch.setenv("SEARCH_MAX_VARIANTS", "5")
    monkeypatch.setenv("SEMANTIC_TIMEOUT_SECONDS", "1.5")

    config = search_config_from_settings(Settings())

    assert config.min_score == 0.4
    assert config.max_variants == 5
    assert config.semantic_timeout_seconds == 1.5
