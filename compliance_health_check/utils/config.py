"""
Configuration management for the Compliance Health Check service.

This module provides centralized configuration management for the
report store, share links, exports and logging. The scoring engine
itself takes no configuration.
"""

import json
import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "HEALTH_CHECK_"
SUPPORTED_EXPORT_FORMATS = ("json", "excel")


class HealthCheckConfig(BaseModel):
    """Main configuration class for the Compliance Health Check."""

    # Core configuration
    project_name: str = Field("Startup Compliance Health Check", description="Project name")
    version: str = Field("1.0.0", description="Version number")

    # File paths
    data_directory: str = Field("./data/reports", description="Directory the report store writes to")
    output_directory: str = Field("./output", description="Directory for exported reports")

    # Share links
    frontend_url: str = Field("http://localhost:5173", description="Base URL shared report links point at")
    share_expiry_days: int = Field(30, ge=1, le=365, description="Default lifetime of a shareable link")

    # History
    history_page_size: int = Field(10, gt=0, description="Default page size for report history")

    # Logging configuration
    log_level: str = Field("INFO", description="Logging level")
    log_file: Optional[str] = Field(None, description="Log file path")

    # Output configuration
    export_formats: List[str] = Field(
        default_factory=lambda: list(SUPPORTED_EXPORT_FORMATS),
        description="Export formats offered for reports",
    )

    def __init__(self, **data):
        """Initialize configuration with environment variable support."""
        for field_name in type(self).model_fields:
            if data.get(field_name) is not None:
                continue
            env_var = f"{ENV_PREFIX}{field_name.upper()}"
            if env_var in os.environ:
                data[field_name] = os.environ[env_var]

        super().__init__(**data)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        return v.upper()

    @field_validator("frontend_url")
    @classmethod
    def validate_frontend_url(cls, v):
        return v.rstrip("/")

    @field_validator("export_formats", mode="before")
    @classmethod
    def validate_export_formats(cls, v):
        if isinstance(v, str):
            v = [part.strip() for part in v.split(",") if part.strip()]
        formats = [fmt.lower() for fmt in v]
        unsupported = [fmt for fmt in formats if fmt not in SUPPORTED_EXPORT_FORMATS]
        if unsupported:
            raise ValueError(f"Unsupported export formats: {unsupported}")
        return formats

    def ensure_directories(self):
        """Ensure that the data and output directories exist."""
        for directory in [self.data_directory, self.output_directory]:
            Path(directory).mkdir(parents=True, exist_ok=True)

    def validate_configuration(self) -> List[str]:
        """Validate the configuration and return any issues."""
        issues = []

        for directory in [self.data_directory, self.output_directory]:
            if Path(directory).exists() and not os.access(directory, os.W_OK):
                issues.append(f"Directory {directory} is not writable")

        if not self.frontend_url.startswith(("http://", "https://")):
            issues.append("Frontend URL must start with http:// or https://")

        return issues


# Global configuration instance
config = HealthCheckConfig()


def get_config() -> HealthCheckConfig:
    """Get the global configuration instance."""
    return config


def update_config(**kwargs) -> HealthCheckConfig:
    """Update the global configuration with new values."""
    global config
    config = HealthCheckConfig(**{**config.model_dump(), **kwargs})
    return config


def load_config_from_file(config_path: str) -> HealthCheckConfig:
    """Load configuration from a JSON or YAML file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r") as f:
        if config_path.suffix.lower() == ".json":
            config_data = json.load(f)
        elif config_path.suffix.lower() in [".yml", ".yaml"]:
            config_data = yaml.safe_load(f) or {}
        else:
            raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

    return HealthCheckConfig(**config_data)
