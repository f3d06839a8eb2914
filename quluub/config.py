from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./quluub.db"

    # JWT Authentication
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 600

    # Application
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CLIENT_URL: str = "http://localhost:5173"
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8080",
    ]

    # Payments
    PLATFORM_FEE: float = 0.1
    DEFAULT_USD_SESSION_RATE: int = 50
    DEFAULT_NGN_SESSION_RATE: int = 25000
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_WEBHOOK_SECRET: Optional[str] = None
    STRIPE_API_URL: str = "https://api.stripe.com/v1"
    PAYSTACK_SECRET_KEY: Optional[str] = None
    PAYSTACK_API_URL: str = "https://api.paystack.co"

    # Video calls
    WHEREBY_API_KEY: Optional[str] = None
    WHEREBY_API_URL: str = "https://api.whereby.dev/v1"

    # Outbound HTTP
    PROVIDER_TIMEOUT_SECONDS: float = 20.0

    # Email Configuration
    EMAIL_NOTIFICATIONS_ENABLED: bool = True
    SMTP_SERVER: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    EMAIL_FROM: Optional[str] = None
    EMAIL_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False
    SMTP_TIMEOUT_SECONDS: int = 8

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
