from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database configuration
    DATABASE_URL: str = "sqlite+aiosqlite:///./wayfare.db"
    DATABASE_ECHO: bool = False
    AUTO_CREATE_TABLES: bool = False

    # Identity provider configuration
    JWT_SECRET: str | None = None
    AUTH_JWKS_URL: str | None = None

    # HTTP
    CORS_ORIGINS: list[str] = ["*"]

    # Invitations
    INVITATION_TTL_DAYS: int = 7

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


settings = Settings()
