import json
import logging
from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_config_logger = logging.getLogger(__name__)

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_SETTINGS_FILE = _BACKEND_DIR / "data" / "settings.json"
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)
_MODEL_KEYS = frozenset({
    "semantic_search_model",
})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Task Search API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:3020"]

    # OpenRouter configuration
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_app_name: str = "Task Search"

    # LLM model used for semantic escalation
    semantic_search_model: str = "google/gemini-3-flash-preview"
    semantic_search_max_tokens: int = 1024

    # Data files (relative to backend directory)
    lexicon_file: str = str(_BACKEND_DIR / "data" / "lexicon.yaml")
    tasks_file: str = str(_BACKEND_DIR / "data" / "tasks.json")

    # Search thresholds
    search_default_limit: int = 10
    search_max_limit: int = 50
    search_min_score: float = 0.25
    search_fuzzy_threshold: float = 0.8
    search_category_bonus: float = 0.1
    search_max_variants: int = 8
    search_max_synonym_variants: int = 3
    search_max_typo_distance: int = 2
    search_escalation_min_candidates: int = 3
    search_escalation_min_top_score: float = 0.5
    search_variation_preview: int = 5
    semantic_timeout_seconds: float = 4.0

    # Per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_http: str = "WARNING"          # httpx / httpcore outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_search: str = "INFO"           # Search pipeline services
    log_level_openrouter: str = "INFO"       # OpenRouter LLM client

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        """Merge runtime overrides from data/settings.json into model settings."""
        if _SETTINGS_FILE.exists():
            try:
                overrides = json.loads(_SETTINGS_FILE.read_text("utf-8"))
                for key in _MODEL_KEYS:
                    if key in overrides and isinstance(overrides[key], str):
                        object.__setattr__(self, key, overrides[key])
            except Exception as exc:
                _config_logger.warning("Could not load settings overrides: %s", exc)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance; reads .env once."""
    return Settings()
