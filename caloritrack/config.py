"""Configuration management for CaloriTrack."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase (remote per-user document store)
    supabase_url: str = ""
    supabase_key: str = ""
    users_table: str = "users"

    # Food recognition service
    recognition_url: str = "http://localhost:5001"
    recognition_timeout: float = 30.0

    # Local draft store
    draft_store_path: str = "~/.caloritrack"

    # App metadata written to user documents
    app_version: str = "1.0.0"
    timezone: str = "Europe/Istanbul"
    locale: str = "tr-TR"

    # Logging
    log_level: str = "INFO"
    log_file: str = ""

    # API server
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "CALORITRACK_"

    @property
    def remote_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
