"""
Business logic managers for the APOD Viewer application.

This module contains configuration management and the single-flight
fetch coordinator.
"""

from .apod_config import APODConfig, ConfigManager, ConfigurationError
# Note: SingleFlightCoordinator not imported here to avoid importing Qt with the config

__all__ = [
    "APODConfig",
    "ConfigManager",
    "ConfigurationError",
    # "SingleFlightCoordinator",  # Import directly from .fetch_coordinator
]
