"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # System Configuration
    app_name: str = "xwing-squad-database"
    debug: bool = False
    environment: str = "development"  # development | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:4173"
    rate_limit_enabled: bool = True

    # Supabase Configuration
    supabase_url: str = "https://test.supabase.co"
    supabase_service_role_key: str = "test-service-role-key"

    # Session Configuration
    session_secret: str = "dev-session-secret-change-me"
    session_cookie_name: str = "xwing_session"
    session_max_age_seconds: int = 60 * 60 * 24 * 30  # 30 days
    session_cookie_secure: bool = False
    oauth_state_max_age_seconds: int = 600

    # OAuth Providers (a provider is enabled when both key and secret are set)
    google_key: str | None = None
    google_secret: str | None = None
    facebook_key: str | None = None
    facebook_secret: str | None = None
    oauth_redirect_base_url: str = "http://localhost:8000"

    # PostHog Configuration
    posthog_api_key: str | None = None
    posthog_host: str = "https://app.posthog.com"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
