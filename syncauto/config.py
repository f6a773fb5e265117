"""Configuration management for the syncauto folder sync system."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .paths import expand_home

DEFAULT_CONFIG_PATH = "~/.config/syncauto/config.yaml"


class FolderSpec(BaseModel):
    """Configuration for a single synced folder."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: str = Field(description="Local tree kept in sync with the destinations")
    mirror_source: str = Field(
        default="",
        validation_alias=AliasChoices("mirror_source", "original_source", "originalSource"),
        description="Optional path copied into source before syncing",
    )
    destinations: Tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("destinations", "destination"),
        description="Remote targets in 'remoteType:remotePath' form",
    )

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        """Validate that a source path is given."""
        if not v.strip():
            raise ValueError("source must not be empty")
        return v

    @field_validator("mirror_source", mode="before")
    @classmethod
    def validate_mirror_source(cls, v: Optional[str]) -> str:
        """Treat a null mirror source as unset."""
        return v or ""


class AppConfig(BaseModel):
    """Main application configuration."""

    model_config = ConfigDict(frozen=True)

    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_file: str = Field(
        default="~/.config/syncauto/syncauto.log",
        description="Path to the activity log file",
    )
    max_concurrent_folders: int = Field(
        default=5, ge=1, description="Number of folders processed at the same time"
    )
    max_concurrent_destinations: Optional[int] = Field(
        default=None,
        ge=1,
        description="Per-folder cap on parallel rclone runs (unbounded when unset)",
    )
    rclone_path: str = Field(
        default="rclone", description="rclone executable name or absolute path"
    )
    sync_timeout: Optional[float] = Field(
        default=None, gt=0, description="Seconds before a single rclone run is killed"
    )
    folders: Dict[str, FolderSpec] = Field(
        default_factory=dict, description="Folders to sync, keyed by name"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(valid_levels))}")
        return v_upper

    @field_validator("folders", mode="before")
    @classmethod
    def validate_folders(cls, v: Optional[dict]) -> dict:
        """Treat a null folders section as empty."""
        return v or {}


def default_config_data() -> dict:
    """Return the content written to a freshly bootstrapped config file."""
    defaults = AppConfig()
    return {
        "log_level": defaults.log_level,
        "log_file": defaults.log_file,
        "max_concurrent_folders": defaults.max_concurrent_folders,
        "rclone_path": defaults.rclone_path,
        "folders": {},
    }


def create_default_config(config_path: str = DEFAULT_CONFIG_PATH) -> bool:
    """
    Write a default configuration file if none exists yet.

    Args:
        config_path: Location of the configuration file

    Returns:
        True if a new file was written, False if one already existed
    """
    config_file = Path(expand_home(config_path))

    if config_file.exists():
        return False

    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, "w", encoding="utf-8") as f:
        f.write("# Example folder entry:\n")
        f.write("# folders:\n")
        f.write("#   docs:\n")
        f.write("#     source: ~/Sync/docs\n")
        f.write("#     mirror_source: ~/Documents\n")
        f.write('#     destinations: ["googledrive:docs", "onedrive:docs"]\n')
        yaml.safe_dump(default_config_data(), f, default_flow_style=False, sort_keys=False)

    return True


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load and validate configuration from YAML file."""
    config_file = Path(expand_home(config_path))

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            raise ValueError("Configuration file is empty")

        return AppConfig(**config_data)

    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML format in config file: {e}")
    except Exception as e:
        raise ValueError(f"Configuration validation error: {e}")
