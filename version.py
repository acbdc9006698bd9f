"""
Version information for the APOD Viewer application.
Author: Oliver Ernster

Centralized version management for the application including
NASA APOD integration details.
"""

# Core application information
__version__ = "1.2.0"
__version_info__ = (1, 2, 0)
__app_name__ = "APODViewer"
__author__ = "Oliver Ernster"
__description__ = "Fetches and displays the NASA Astronomy Picture of the Day for any date"

# APOD integration information
__apod_api_provider__ = "NASA Open APIs"
__apod_api_url__ = "https://api.nasa.gov/planetary/apod"

# License information
__license__ = "GPL v3"


def get_version_string() -> str:
    """Get formatted version string."""
    return f"{__app_name__} v{__version__}"


def get_user_agent() -> str:
    """Get the User-Agent header sent with every HTTP request."""
    return f"{__app_name__}/{__version__}"
