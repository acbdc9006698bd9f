"""
Configuration management for the APOD Viewer application.
Author: Oliver Ernster

This module handles loading, saving, and validating application configuration
using Pydantic models for type safety and validation.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from version import __apod_api_url__, __version__

logger = logging.getLogger(__name__)

DEMO_API_KEY = "DEMO_KEY"
API_KEY_ENV_VAR = "NASA_API_KEY"


class APODConfig(BaseModel):
    """
    Configuration for NASA APOD access.

    ``DEMO_KEY`` works without registration but is heavily rate limited.
    """

    nasa_api_key: str = Field(default=DEMO_API_KEY, description="NASA API key")
    base_url: str = Field(default=__apod_api_url__, description="APOD endpoint URL")
    timeout_seconds: int = Field(
        default=15,
        ge=5,
        le=60,
        description="API request timeout"
    )
    hd_images: bool = Field(
        default=True,
        description="Download the high definition picture when available"
    )
    cache_directory: Optional[str] = Field(
        default=None,
        description="Picture cache directory, platform default if unset"
    )
    log_level: str = Field(default="WARNING", description="Application log level")

    @field_validator("nasa_api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("nasa_api_key cannot be empty")
        return v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http(s) URL")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    def is_demo_key(self) -> bool:
        """Check if the shared demo key is in use."""
        return self.nasa_api_key == DEMO_API_KEY


class ConfigurationError(Exception):
    """Exception raised for configuration-related errors."""

    pass


class ConfigManager:
    """
    Manages application configuration with file persistence.

    Handles loading configuration from JSON files, creating default
    configurations, and saving changes back to disk.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file. If None, uses the platform default
        """
        if config_path is None:
            self.config_path = self.get_default_config_path()
        else:
            self.config_path = Path(config_path)
        self.config: Optional[APODConfig] = None

        logger.debug(f"ConfigManager initialized with path: {self.config_path}")

    @staticmethod
    def get_default_config_path() -> Path:
        """
        Get the default configuration file path.

        On Windows, uses AppData/Roaming/APODViewer/config.json
        On Linux, uses XDG_CONFIG_HOME/APODViewer/config.json or ~/.config/APODViewer/config.json

        Returns:
            Path: Default configuration file path
        """
        if os.name == "nt":  # Windows
            appdata = os.environ.get("APPDATA")
            if appdata:
                return Path(appdata) / "APODViewer" / "config.json"
            return Path("config.json")

        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            config_dir = Path(xdg_config) / "APODViewer"
        else:
            config_dir = Path.home() / ".config" / "APODViewer"
        return config_dir / "config.json"

    def load_config(self) -> APODConfig:
        """
        Load configuration from file.

        If the configuration file doesn't exist, creates a default one.
        The NASA_API_KEY environment variable overrides the stored key.

        Returns:
            APODConfig: The loaded configuration

        Raises:
            ConfigurationError: If the configuration file is invalid
        """
        logger.debug(f"Loading config from: {self.config_path}")

        if not self.config_path.exists():
            logger.info(
                f"Config file doesn't exist, creating default at: {self.config_path}"
            )
            self.create_default_config()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in config file: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to read config: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file must contain a JSON object, got {type(data).__name__}"
            )

        env_key = os.environ.get(API_KEY_ENV_VAR)
        if env_key:
            data["nasa_api_key"] = env_key

        try:
            self.config = APODConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

        logger.debug(f"Successfully loaded config from: {self.config_path}")
        return self.config

    def save_config(self, config: APODConfig) -> bool:
        """
        Save configuration to file.

        Args:
            config: Configuration data to save

        Returns:
            bool: True if saved successfully, False otherwise
        """
        logger.info(f"Saving config to: {self.config_path}")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(config.model_dump(), f, indent=2, ensure_ascii=False)
            self.config = config
            return True
        except OSError as e:
            logger.error(f"Failed to save config to {self.config_path}: {e}")
            return False

    def create_default_config(self) -> None:
        """Create a default configuration file."""
        self.save_config(APODConfig())

    def update_api_key(self, api_key: str) -> None:
        """
        Update the NASA API key and save to file.

        Raises:
            ConfigurationError: If the key is empty
        """
        if self.config is None:
            self.load_config()

        data = self.config.model_dump()
        data["nasa_api_key"] = api_key
        try:
            self.config = APODConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid API key: {e}")
        self.save_config(self.config)

    def get_config_summary(self, config: Optional[APODConfig] = None) -> dict:
        """
        Get a summary of a configuration for display.

        Args:
            config: Configuration to summarise, the loaded one if None

        Returns:
            dict: Configuration summary
        """
        if config is None:
            if self.config is None:
                self.load_config()
            config = self.config

        return {
            "app_version": __version__,
            "api_url": config.base_url,
            "api_key": "Demo key" if config.is_demo_key() else "Personal key",
            "hd_images": "Yes" if config.hd_images else "No",
            "cache_directory": config.cache_directory or "Default",
            "timeout": f"{config.timeout_seconds} seconds",
        }
