"""Application settings using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database (Supabase Postgres)
    database_url: str

    # Supabase project
    supabase_url: str
    supabase_anon_key: str
    supabase_service_key: str | None = None
    supabase_jwt_secret: str
    jwt_audience: str = "authenticated"

    # Storage
    storage_bucket: str = "staff-photos"

    # Timezone used for exported timestamps
    timezone: str = "Africa/Lagos"

    # Upload limits
    max_upload_mb: int = 5
    upload_staging_dir: str = "uploads"

    @property
    def max_upload_bytes(self) -> int:
        """Maximum upload size in bytes."""
        return self.max_upload_mb * 1024 * 1024

    @property
    def storage_api_key(self) -> str:
        """Key used for server-side storage calls.

        The service-role key is preferred when configured; it is never handed
        to clients (see the config endpoint).
        """
        return self.supabase_service_key or self.supabase_anon_key


settings = Settings()
