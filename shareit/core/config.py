from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "ShareIt API"
    # Comma-separated origins for CORS. If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""

    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./shareit.db"
    # sql|memory. memory keeps everything in process and is lost on restart.
    STORAGE_BACKEND: str = "sql"

    # The caller is identified by this header; there is no authentication.
    USER_ID_HEADER: str = "X-Sharer-User-Id"
    DEFAULT_PAGE_SIZE: int = 10

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Heroku-style postgres:// URLs; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v

    @field_validator("STORAGE_BACKEND", mode="after")
    @classmethod
    def check_storage_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("sql", "memory"):
            raise ValueError("STORAGE_BACKEND must be 'sql' or 'memory'")
        return v


settings = Settings()
