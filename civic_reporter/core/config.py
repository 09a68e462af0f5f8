from pydantic_settings import BaseSettings
from pydantic import field_validator
import logging

class Settings(BaseSettings):
    PROJECT_NAME: str = "Civic Issue Reporter"

    # Local key-value store. Any SQLAlchemy URL works; the default keeps
    # everything in a single SQLite file next to the app.
    DATABASE_URL: str = "sqlite:///./civic_reporter.db"
    DATABASE_ECHO: bool = False

    LOG_LEVEL: str = "INFO"

    # The mobile client let anyone submit and stamped "Anonymous".
    # Requiring a session is the default; turn off to restore that behaviour.
    REQUIRE_SESSION_FOR_REPORTS: bool = True

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: str) -> str:
        """Normalize log level names: 'debug', ' Info ' -> 'DEBUG', 'INFO'."""
        level = str(v).strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    class Config:
        case_sensitive = True
        env_file = ".env"

settings = Settings()
