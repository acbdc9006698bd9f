"""
APOD Viewer application

Fetches the NASA Astronomy Picture of the Day for a chosen date, caches the
picture locally and hands the result to a presentation layer.

Features:
- Single-flight background fetching
- Classified outcomes (displayable, rejected, system failure)
- Local image cache per date
"""

from version import __version__, __author__, __description__

__all__ = ["__version__", "__author__", "__description__"]
