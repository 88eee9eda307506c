"""Configuration management for the log archiver."""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from log_archiver.errors import ConfigError


class LocalConfig(BaseModel):
    """Local log directory settings."""
    model_config = ConfigDict(frozen=True)

    log_directory: str
    filename_pattern: str = "oempro-*.csv"
    retention_days: int = Field(default=7, ge=0)

    @field_validator('log_directory', mode='before')
    @classmethod
    def expand_paths(cls, v):
        """Expand environment variables and user home directory."""
        if isinstance(v, str):
            return os.path.expanduser(os.path.expandvars(v))
        return v

    @field_validator('log_directory', 'filename_pattern')
    @classmethod
    def not_empty(cls, v):
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator('filename_pattern')
    @classmethod
    def plain_glob(cls, v):
        """Only match files directly inside log_directory."""
        if '/' in v or '\\' in v or '**' in v:
            raise ValueError("must be a plain filename glob without '/' or '**'")
        return v


class RemoteConfig(BaseModel):
    """S3-compatible object store settings."""
    model_config = ConfigDict(frozen=True)

    bucket: str
    path_prefix: str = "pmta-logs"
    account_id: str
    access_key_id: str
    secret_access_key: str = Field(repr=False)
    endpoint_url: Optional[str] = None
    region: str = "auto"

    @field_validator('bucket', 'account_id', 'access_key_id', 'secret_access_key')
    @classmethod
    def not_empty(cls, v):
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @property
    def resolved_endpoint(self) -> str:
        """Account-scoped endpoint unless one is configured explicitly."""
        if self.endpoint_url:
            return self.endpoint_url
        return f"https://{self.account_id}.r2.cloudflarestorage.com"


class RetryConfig(BaseModel):
    """Upload retry policy."""
    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(default=3, ge=0)
    initial_backoff_seconds: float = Field(default=2, ge=0)
    max_backoff_seconds: float = Field(default=60, ge=0)
    backoff_multiplier: float = Field(default=2, ge=1)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    file: str = "log_archiver.log"
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


class Config(BaseModel):
    """Main configuration model."""
    model_config = ConfigDict(frozen=True)

    local: LocalConfig
    remote: RemoteConfig
    retry: RetryConfig = RetryConfig()
    logging: LoggingConfig = LoggingConfig()


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        field = '.'.join(str(part) for part in item['loc'])
        problems.append(f"  - {field}: {item['msg']}")
    return "Configuration validation failed:\n" + "\n".join(problems)


def parse_config(config_data: dict) -> Config:
    """Validate a configuration dictionary.

    Raises:
        ConfigError: if any field is missing or invalid
    """
    # Drop "_comment" style keys so the template can carry notes
    config_data = {k: v for k, v in config_data.items() if not k.startswith('_')}
    try:
        return Config(**config_data)
    except ValidationError as e:
        raise ConfigError(_format_validation_error(e)) from e


def load_config(config_path: str = "config.json") -> Config:
    """Load configuration from JSON file."""
    config_file = Path(config_path)

    if not config_file.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e

    if not isinstance(config_data, dict):
        raise ConfigError(f"Configuration in {config_path} must be a JSON object")

    return parse_config(config_data)


def create_default_config(config_path: str = "config.json") -> None:
    """Create a default configuration file.

    The file holds credentials, so it is written owner-readable only.
    """
    default_config = {
        "_comment": "Fill in the remote section before running the archiver",
        "local": {
            "log_directory": "/var/log/pmta-accounting",
            "filename_pattern": "oempro-*.csv",
            "retention_days": 7
        },
        "remote": {
            "bucket": "",
            "path_prefix": "pmta-logs",
            "account_id": "",
            "access_key_id": "",
            "secret_access_key": "",
            "endpoint_url": None
        },
        "retry": {
            "max_retries": 3,
            "initial_backoff_seconds": 2,
            "max_backoff_seconds": 60,
            "backoff_multiplier": 2
        },
        "logging": {
            "level": "INFO",
            "file": "log_archiver.log",
            "max_bytes": 10485760,
            "backup_count": 5
        }
    }

    config_file = Path(config_path)
    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, 'w') as f:
        json.dump(default_config, f, indent=2)
    os.chmod(config_file, 0o600)
