from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be configured via .env file or environment variables.
    """

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30  # Seconds to wait for a pooled connection

    # JWT Authentication
    SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24

    # Password hashing (scrypt log2 cost)
    PASSWORD_HASH_ROUNDS: int = 16

    # Tenancy
    RESERVED_SUBDOMAINS: str = "www,api"
    DEFAULT_MAX_USERS: int = 10
    TRIAL_MAX_USERS: int = 50
    TRIAL_DAYS: int = 30

    # Timesheets
    STANDARD_WEEK_HOURS: float = 40.0

    # Application
    APP_NAME: str = "Timekeeper API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # CORS
    CORS_ORIGINS: str = ""
    CORS_ALLOW_CREDENTIALS: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS from comma-separated string"""
        if not self.CORS_ORIGINS:
            return []
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def reserved_subdomains_set(self) -> set[str]:
        """Subdomains that never identify a tenant (www, api, ...)"""
        return {
            label.strip().lower() for label in self.RESERVED_SUBDOMAINS.split(",") if label.strip()
        }


# Global settings instance
settings = Settings()
