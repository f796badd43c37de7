"""Configuration management."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    
    # Data storage
    data_dir: Path = Field(default=Path("data"))
    db_filename: str = Field(default="food_bricks.json")
    
    # Trial rules
    max_active_observations: int = Field(default=3, ge=1)
    default_observation_period_days: int = Field(default=3, ge=1, le=14)
    
    # Dashboard
    recent_activity_limit: int = Field(default=10, ge=1)
    
    # Logging
    log_level: str = Field(default="INFO")
    
    # Web server
    web_host: str = Field(default="127.0.0.1")
    web_port: int = Field(default=8000)
    
    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_filename


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
