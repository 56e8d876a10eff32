"""Application configuration loaded from environment variables and .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./dev.db"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Dialogue editor
    EDITOR_GRID_SIZE: float = 20
    EDITOR_MIN_ZOOM: float = 0.25
    EDITOR_MAX_ZOOM: float = 2.0
    EDITOR_UNDO_DEPTH: int = 50
    DEFAULT_DIALOGUE_NAME: str = "New Dialogue"


settings = Settings()
