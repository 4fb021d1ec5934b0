from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings configuration."""

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Jigsaw Board API"

    # CORS settings
    BACKEND_CORS_ORIGINS: list[str] = ["*"]

    # Board defaults
    DEFAULT_ROWS: int = 6
    DEFAULT_COLS: int = 4
    PIECE_SIZE: float = 100.0
    SNAP_THRESHOLD: float = 20.0

    # Scatter band around the board
    SCATTER_BAND_ROWS: int = 2
    SCATTER_GAP_RATIO: float = 0.1

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        """Pydantic configuration class."""

        case_sensitive = True
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Create instance
settings = get_settings()
