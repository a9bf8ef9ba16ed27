"""Application configuration loaded from environment variables."""
import os
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Adaptive state database location
    data_path: str = os.getenv("DATA_PATH", os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

    @property
    def state_db_path(self) -> str:
        return os.path.join(self.data_path, "adaptive_state.db")

    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8082

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Adaptive engine
    learning_enabled: bool = True
    profile_debounce_seconds: float = 10.0
    persist_debounce_seconds: float = 5.0
    theme_refresh_seconds: float = 60.0
    interaction_log_capacity: int = 1000
    persisted_interactions: int = 500

    class Config:
        env_prefix = "MOODMASH_"


@lru_cache
def get_settings() -> Settings:
    return Settings()
