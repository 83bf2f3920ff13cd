"""Application configuration management."""

from typing import Optional, List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database Configuration
    custom_database_url: Optional[str] = Field(default=None, description="Full database URL, overrides the PostgreSQL components")
    postgres_host: str = Field(default="localhost", description="PostgreSQL host")
    postgres_port: int = Field(default=5432, description="PostgreSQL port")
    postgres_db: str = Field(default="job_portal", description="PostgreSQL database name")
    postgres_user: str = Field(default="portal_user", description="PostgreSQL username")
    postgres_password: str = Field(default="", description="PostgreSQL password")
    auto_create_tables: bool = Field(default=False, description="Create tables on startup instead of running migrations")
    database_echo: bool = Field(default=False, description="Log emitted SQL statements")

    # Redis Configuration
    redis_host: str = Field(default="localhost", description="Redis host")
    redis_port: int = Field(default=6379, description="Redis port")
    redis_db: int = Field(default=0, description="Redis database number")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    cors_origins: List[str] = Field(
        default=["http://localhost:5173", "http://localhost:5174"],
        description="Allowed CORS origins"
    )
    client_url: str = Field(default="http://localhost:5173", description="Frontend base URL used in emailed links")

    # Token Configuration
    secret_key: str = Field(default="dev-secret-key", description="JWT secret key")
    refresh_secret_key: str = Field(default="dev-refresh-secret-key", description="JWT refresh token secret key")
    algorithm: str = Field(default="HS256", description="JWT algorithm")
    access_token_expire_minutes: int = Field(default=1440, description="Access token expiry minutes")
    refresh_token_expire_days: int = Field(default=7, description="Refresh token expiry days")
    password_reset_expire_minutes: int = Field(default=10, description="Password reset token expiry minutes")

    # Search Configuration
    default_page_size: int = Field(default=10, description="Default page size for listings")
    feed_page_size: int = Field(default=20, description="Default page size for the candidate job feed")
    max_page_size: int = Field(default=100, description="Upper bound for the limit query parameter")

    # Notification Configuration
    notification_retention_days: int = Field(default=60, description="Days before a notification expires")
    disabled_token_retention_days: int = Field(default=30, description="Days before a disabled device token is deleted")
    notify_candidates_on_job_post: bool = Field(default=False, description="Broadcast new jobs to every candidate")

    # Push (FCM) Configuration
    fcm_project_id: Optional[str] = Field(default=None, description="Firebase project id")
    fcm_credentials_file: Optional[str] = Field(default=None, description="Path to the service account JSON file")
    fcm_timeout_seconds: float = Field(default=10.0, description="Timeout for FCM requests")

    # Email Configuration
    email_notifications_enabled: bool = Field(default=False, description="Deliver notifications over email")
    smtp_host: str = Field(default="localhost", description="SMTP server host")
    smtp_port: int = Field(default=587, description="SMTP server port")
    smtp_username: Optional[str] = Field(default=None, description="SMTP username")
    smtp_password: Optional[str] = Field(default=None, description="SMTP password")
    smtp_use_tls: bool = Field(default=True, description="Use TLS for SMTP")
    smtp_from_address: str = Field(default="no-reply@jobportal.local", description="Sender address")

    # Celery Configuration
    celery_broker_url: Optional[str] = Field(default=None, description="Celery broker URL")
    celery_result_backend: Optional[str] = Field(default=None, description="Celery result backend")

    # Application Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    environment: str = Field(default="development", description="Environment name")

    @property
    def database_url(self) -> str:
        """Construct database URL from components."""
        if self.custom_database_url:
            return self.custom_database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def redis_url(self) -> str:
        """Construct Redis URL from components."""
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def celery_broker_url_computed(self) -> str:
        """Get Celery broker URL, defaulting to Redis URL."""
        return self.celery_broker_url or self.redis_url

    @property
    def celery_result_backend_computed(self) -> str:
        """Get Celery result backend URL, defaulting to Redis URL."""
        return self.celery_result_backend or self.redis_url

    @property
    def push_enabled(self) -> bool:
        """Whether FCM credentials are configured."""
        return bool(self.fcm_project_id and self.fcm_credentials_file)


# Global settings instance
settings = Settings()
