"""Application configuration via environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    database_url: str = "sqlite:///./admin_panel.db"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Session token
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440  # 24 hours
    legacy_tokens_enabled: bool = False  # raw user-id cookies; enable only while migrating old sessions

    # First-run bootstrap admin (empty username disables it)
    admin_username: str = ""
    admin_password: str = ""

    # 2FA
    totp_issuer: str = "Admin Panel"
    totp_valid_window: int = 2

    # Cookies
    cookie_secure: bool = False
    cookie_max_age_seconds: int = 24 * 60 * 60

    # Auth endpoint rate limiting
    rate_limit_max_requests: int = 5
    rate_limit_window_seconds: int = 300
    trust_forwarded_headers: bool = False  # only behind a proxy that overwrites X-Forwarded-For

    model_config = {"env_prefix": "AP_", "env_file": ".env"}


settings = Settings()
