"""Environment settings - loads AWS access and runtime options from .env file.

Priority:
1. Environment variables (highest priority)
2. .env file values
3. Default values in this file
"""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root: src/bucketctl/core/settings.py -> src/bucketctl/core/ -> src/bucketctl/ -> src/ -> project_root/
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
ENV_FILE_PATH = PROJECT_ROOT / ".env"


class EnvSettings(BaseSettings):
    """Environment-based configuration loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============================================
    # AWS / S3
    # ============================================
    aws_region: str = "us-east-1"
    aws_endpoint_url: str = ""  # e.g. http://localhost:9000 for S3-compatible stores
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_session_token: str = ""

    # Transport limits for a single remote call. Retries across passes are
    # the caller's job, so botocore gets one attempt by default.
    s3_connect_timeout: float = 10.0
    s3_read_timeout: float = 30.0
    s3_max_attempts: int = 1

    # ============================================
    # Reconciliation
    # ============================================
    reconcile_concurrent: bool = False

    # ============================================
    # Logging
    # ============================================
    log_level: str = "INFO"
    log_file_enabled: bool = False
    log_file_path: str = "logs/bucketctl.log"
    log_file_max_size_mb: int = 10
    log_file_backup_count: int = 5

    @field_validator("s3_max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("s3_max_attempts must be >= 1")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()


settings = EnvSettings()
