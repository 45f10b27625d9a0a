"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock mode enables local development without a real bucket.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings shared by the proxy service and the asset tools.

    All settings can be overridden via environment variables.
    """

    # API Configuration
    api_title: str = "Asset Gateway"
    api_version: str = "v1"

    # R2 Storage Configuration
    r2_account_id: str = Field(
        default="",
        description="Cloudflare account ID for R2"
    )
    r2_access_key_id: str = Field(
        default="",
        description="R2 access key ID"
    )
    r2_secret_access_key: str = Field(
        default="",
        description="R2 secret access key"
    )
    r2_bucket_name: str = Field(
        default="",
        description="R2 bucket holding the assets"
    )
    r2_endpoint_url: Optional[str] = Field(
        default=None,
        description="R2 endpoint URL. Auto-constructed from account_id if not provided."
    )
    r2_public_url: str = Field(
        default="",
        description="Public base URL the proxy is reachable at, used to rewrite legacy asset URLs."
    )
    r2_mock_mode: bool = Field(
        default=False,
        description="Use in-memory bucket instead of real R2."
    )

    # Local directories
    legacy_uploads_dir: str = Field(
        default="server/uploads",
        description="Old on-disk uploads directory, emptied by the migration tool"
    )
    uploads_dir: str = Field(
        default="r2-assets/uploads",
        description="Where the migration tool moves legacy uploads"
    )
    assets_dir: str = Field(
        default="r2-assets",
        description="Root of the tree pushed to the bucket by the uploader"
    )

    # Upload behavior
    upload_workers: int = Field(
        default=1,
        ge=1,
        description="Concurrent uploads. 1 uploads files one at a time."
    )
    skip_unchanged: bool = Field(
        default=False,
        description="Skip files whose MD5 matches the ETag already in the bucket."
    )

    # Timeouts
    proxy_fetch_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound on a single bucket fetch made by the proxy"
    )
    upload_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Connect/read timeout applied to each upload"
    )

    # CORS
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of origins allowed to fetch assets from the browser. * allows any."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def r2_endpoint(self) -> str:
        """
        Construct R2 endpoint URL from account ID.

        R2 endpoints follow the pattern: https://{account_id}.r2.cloudflarestorage.com
        """
        if self.r2_endpoint_url:
            return self.r2_endpoint_url
        return f"https://{self.r2_account_id}.r2.cloudflarestorage.com"

    def validate_required_fields(self) -> list[str]:
        """
        Validate that bucket credentials are set unless in mock mode.

        Returns list of missing environment variable names.
        """
        missing = []

        if self.r2_mock_mode:
            return missing

        if not self.r2_account_id and not self.r2_endpoint_url:
            missing.append("R2_ACCOUNT_ID or R2_ENDPOINT_URL")
        if not self.r2_access_key_id:
            missing.append("R2_ACCESS_KEY_ID")
        if not self.r2_secret_access_key:
            missing.append("R2_SECRET_ACCESS_KEY")
        if not self.r2_bucket_name:
            missing.append("R2_BUCKET_NAME")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, call get_settings.cache_clear() to reset.
    """
    return Settings()
