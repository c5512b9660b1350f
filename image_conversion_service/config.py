"""Configuration management using pydantic-settings."""

from typing import Literal, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the image conversion service, loaded once at startup."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Service
    service_name: str = "image-conversion"
    service_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    # Upload / conversion
    max_upload_size: int = 20 * 1024 * 1024
    convert_binary: str = "convert"
    workspace_prefix: str = "image-conversion"
    workspace_base_dir: Optional[str] = None

    # Result delivery: "inline" streams bytes back, "storage" uploads to S3
    publish_mode: Literal["inline", "storage"] = "inline"

    # S3 settings (required in storage mode)
    aws_access_key: Optional[str] = None
    aws_secret_key: Optional[str] = None
    aws_s3_bucket: Optional[str] = None
    aws_region: Optional[str] = None
    s3_endpoint_url: Optional[str] = None  # MinIO or other S3-compatible endpoint
    s3_public_host: str = "s3.{region}.amazonaws.com"

    @model_validator(mode="after")
    def _require_storage_settings(self) -> "Settings":
        if self.publish_mode == "storage":
            required = ("aws_access_key", "aws_secret_key", "aws_s3_bucket", "aws_region")
            missing = [name.upper() for name in required if not getattr(self, name)]
            if missing:
                raise ValueError(
                    f"storage mode requires {', '.join(missing)} to be set"
                )
        return self


# Global settings instance
settings = Settings()
