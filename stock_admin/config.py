from typing import List, Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class AppConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """
    # Application
    app_env: str = "local"
    log_level: str = "DEBUG"

    # Stock API
    api_kind: Literal["csv", "http"] = "csv"
    api_base_url: str = "http://localhost:8080"
    api_timeout_seconds: float = 10.0

    # Data paths
    data_dir: str = "sample_data"
    export_dir: str = "exports"

    # UI settings
    default_page_size: int = 10
    page_size_options: List[int] = [5, 10, 25]
    notification_ttl_seconds: float = 4.0

    # Session context (store/user the screen acts on behalf of)
    session_store_id: Optional[str] = None
    session_user_id: Optional[str] = None

    # Seed data settings
    default_seed_count: int = 40
    default_seed_value: int = 42

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Return the AppConfig instance (singleton pattern)."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config

def set_config_for_test(**kwargs):
    """For testing only: override the AppConfig instance with new values."""
    global _config
    _config = AppConfig(**kwargs)
