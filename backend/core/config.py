"""
ShelfSignal Configuration

Uses pydantic-settings for type-safe environment variable loading.
Every knob of the reorder-signal pipeline lives here with its default,
so the demo never carries magic numbers in the pipeline code.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

# Find .env file: check CWD first, then parent (project root)
_env_file = Path(".env")
if not _env_file.exists():
    _parent_env = Path(__file__).resolve().parent.parent.parent / ".env"
    if _parent_env.exists():
        _env_file = _parent_env


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "ShelfSignal"
    app_version: str = "1.0.0"
    app_env: str = "local"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # ── Data synthesis ───────────────────────────────────────────────
    batch_size: int = 100
    low_stock_probability: float = 0.6
    safety_factor: float = 0.5
    # Simulated API latency before a batch "arrives"
    fetch_delay_seconds: float = 1.0
    random_seed: int | None = None

    # ── Classifier ───────────────────────────────────────────────────
    epochs: int = 50
    learning_rate: float = 0.05
    hidden_units: list[int] = [16, 8]
    log_every_n_epochs: int = 10

    # ── Decisions ────────────────────────────────────────────────────
    decision_threshold: float = 0.5

    model_config = {
        "env_file": str(_env_file),
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    settings = Settings()
    _enforce_pipeline_guardrails(settings)
    return settings


def _enforce_pipeline_guardrails(settings: Settings) -> None:
    if not 0.0 <= settings.low_stock_probability <= 1.0:
        raise ValueError("low_stock_probability must be within [0, 1]")
    if not 0.0 <= settings.decision_threshold <= 1.0:
        raise ValueError("decision_threshold must be within [0, 1]")
    if settings.safety_factor < 0:
        raise ValueError("safety_factor must be non-negative")
    if settings.epochs <= 0:
        raise ValueError("epochs must be positive")
    if settings.learning_rate <= 0:
        raise ValueError("learning_rate must be positive")
    if settings.fetch_delay_seconds < 0:
        raise ValueError("fetch_delay_seconds must be non-negative")
    if not settings.hidden_units or any(units <= 0 for units in settings.hidden_units):
        raise ValueError("hidden_units must be a non-empty list of positive layer sizes")
