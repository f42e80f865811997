from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
import os


def _get_secret_key() -> str:
    key = os.getenv("SECRET_KEY")
    if not key:
        raise ValueError("SECRET_KEY environment variable is required")
    return key


def _get_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        raise ValueError("DATABASE_URL environment variable is required")
    return url


class Settings(BaseSettings):
    APP_NAME: str = "Post Comments API"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    SECRET_KEY: str = Field(
        default_factory=_get_secret_key, description="Secret key for JWT tokens"
    )
    ACCESS_TOKEN_ALGORITHM: str = "HS256"
    DATABASE_URL: str = Field(
        default_factory=_get_database_url, description="Database connection URL"
    )
    DB_ECHO: bool = False
    AUTO_CREATE_TABLES: bool = True

    USER_DIRECTORY_URL: str = "http://localhost:8001"
    USER_DIRECTORY_TIMEOUT_SECONDS: float = 5.0

    COMMENT_BODY_MAX_LENGTH: int = Field(default=2000, ge=1)
    COMMENT_OPERATION_TIMEOUT_SECONDS: float | None = Field(default=10.0, gt=0)

    CORS_ORIGINS: str = Field(
        default="http://localhost:3000,http://localhost:8080,http://127.0.0.1:3000",
        description="Comma-separated list of allowed origins",
    )

    RATE_LIMIT_PER_MINUTE: int = 60
    COMMENT_RATE_LIMIT_PER_MINUTE: int = Field(default=20, ge=1)

    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS")
    @classmethod
    def validate_cors_origins(cls, v: str) -> str:
        if not v:
            raise ValueError("CORS_ORIGINS cannot be empty")

        origins = [origin.strip() for origin in v.split(",")]
        for origin in origins:
            if not origin.startswith(("http://", "https://")):
                raise ValueError(
                    f"Invalid CORS origin format: {origin}. Must start with http:// or https://"
                )

        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return level

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def cors_origins_list(self) -> list[str]:
        return [
            origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()
        ]


settings = Settings()  # type: ignore[call-arg]
