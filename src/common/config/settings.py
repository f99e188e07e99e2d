# File: common/config/settings.py

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

# Calculate base directory for consistent file paths
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent
ENV_PATH = BASE_DIR / ".env"


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"  # "production", "development" or "test"
    APP_NAME: str = Field("Artmart", description="Display name used in emails and alerts")

    # Token verification (tokens are issued by the auth service)
    ACCESS_SECRET: str = Field(..., description="Shared secret used to verify access tokens")
    ALGORITHM: str = Field("HS256", description="JWT signing algorithm")
    ACCESS_AUDIENCE: str = Field("api", description="Expected audience claim of access tokens")

    # MongoDB
    MONGO_URI: str = Field("mongodb://localhost:27017", description="MongoDB connection URI")
    MONGO_DB: str = Field("artmart_db", description="MongoDB database name")
    MONGO_TIMEOUT: int = Field(5000, description="MongoDB connection timeout in milliseconds")

    # Redis
    REDIS_HOST: str = Field("localhost", description="Redis host")
    REDIS_PORT: int = Field(6379, description="Redis port")
    REDIS_DB: int = Field(0, description="Redis database number")
    REDIS_PASSWORD: str = Field("", description="Redis password")
    REDIS_SSL_CA_CERTS: str = Field("", description="Path to Redis SSL CA certificate")
    REDIS_SSL_CERT: str = Field("", description="Path to Redis SSL certificate")
    REDIS_SSL_KEY: str = Field("", description="Path to Redis SSL key")
    REDIS_USE_SSL: bool = Field(False, description="Use SSL for Redis connection")

    # Email
    SMTP_HOST: str = Field("localhost", description="SMTP server host")
    SMTP_PORT: int = Field(587, description="SMTP server port")
    SMTP_USER: str = Field("", description="SMTP username")
    SMTP_PASSWORD: str = Field("", description="SMTP password")
    SMTP_FROM_EMAIL: str = Field("no-reply@artmart.app", description="Sender address for outgoing mail")
    SMTP_TLS: bool = Field(True, description="Use TLS when talking to the SMTP server")
    MOCK_EMAIL: bool = Field(True, description="Log emails instead of sending them")
    ADMIN_ALERT_EMAIL: str = Field("admin@artmart.app", description="Recipient of SLA alert emails")
    ADMIN_PANEL_URL: str = Field("https://admin.artmart.app", description="Base URL of the admin panel")

    # Asset storage
    STORAGE_API_URL: str = Field("", description="Base URL of the asset storage API")
    STORAGE_API_KEY: str = Field("", description="API key for the asset storage API")
    STORAGE_TIMEOUT_SECONDS: int = Field(10, description="Timeout for asset storage calls")

    # Sentry
    SENTRY_DSN: str = Field("", description="Sentry DSN, empty disables reporting")
    SENTRY_TRACES_SAMPLE_RATE: float = Field(0.0, description="Sentry traces sample rate")
    SENTRY_SEND_PII: bool = Field(False, description="Send personally identifiable information to Sentry")

    # Reports & moderation
    REPORT_SLA_HOURS: int = Field(24, description="Hours an admin has to act on a report")
    REPORT_DUPLICATE_WINDOW_HOURS: int = Field(24, description="Window for duplicate report suppression")
    DEFAULT_SUSPENSION_DAYS: int = Field(7, description="Default suspension length in days")

    # SLA monitor
    SLA_MONITOR_ENABLED: bool = Field(True, description="Run the SLA monitor on startup")
    SLA_MONITOR_INTERVAL_MINUTES: int = Field(15, description="Minutes between SLA monitor cycles")
    SLA_URGENT_WINDOW_HOURS: int = Field(1, description="Deadline window for urgent alerts")
    SLA_WARNING_WINDOW_HOURS: int = Field(4, description="Deadline window for warning alerts")
    SLA_ALERT_DEDUP_BACKEND: Literal["memory", "redis"] = Field("memory", description="Where alerted keys are kept")
    SLA_ALERT_EMAIL_TIMEOUT_SECONDS: float = Field(30, description="Upper bound for one alert email send")

    class Config:
        env_file = ENV_PATH
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

# Singleton settings instance
settings = Settings()
