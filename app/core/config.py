from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"

    # HTTP
    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 8080

    # Database
    DATABASE_URL: str | None = Field(
        default=None, validation_alias=AliasChoices("DATABASE_URL", "DB_DSN")
    )
    DB_ECHO: bool = False
    DB_POOL_MIN_SIZE: int = 1
    DB_POOL_MAX_SIZE: int = 10
    DB_POOL_RECYCLE_SECONDS: int = 300  # conexiones ociosas se reciclan a los 5 min
    DB_STATEMENT_TIMEOUT_MS: int = 15000

    # Migrations
    MIGRATIONS_DIR: str = "migrations"

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
