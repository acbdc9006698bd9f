"""
Disk-based cache for downloaded APOD pictures.

One file is kept per picture date so a date that has been fetched once can
be shown again without downloading the picture a second time.
"""

import logging
import os
import sys
import tempfile
import threading
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".jpg"
KNOWN_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tif", ".tiff", ".webp"}


def get_default_cache_dir() -> Path:
    """
    Get the platform cache directory for pictures.

    On Windows, uses LOCALAPPDATA/APODViewer/images
    On macOS, uses ~/Library/Caches/APODViewer
    On Linux, uses XDG_CACHE_HOME/apod-viewer or ~/.cache/apod-viewer
    """
    if sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home()))
        return base / "APODViewer" / "images"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches" / "APODViewer"
    xdg_cache = os.environ.get("XDG_CACHE_HOME")
    base = Path(xdg_cache) if xdg_cache else Path.home() / ".cache"
    return base / "apod-viewer"


class ImageCache:
    """Thread-safe picture cache keyed by APOD date."""

    def __init__(self, cache_dir: Optional[str] = None):
        """
        Initialize image cache.

        Args:
            cache_dir: Directory for cached pictures, platform default if None
        """
        self.cache_dir = Path(cache_dir) if cache_dir else get_default_cache_dir()
        self._lock = threading.RLock()

    @staticmethod
    def _extension_for(url: Optional[str]) -> str:
        if not url:
            return DEFAULT_EXTENSION
        suffix = Path(urlparse(url).path).suffix.lower()
        return suffix if suffix in KNOWN_EXTENSIONS else DEFAULT_EXTENSION

    def path_for(self, picture_date: date, url: Optional[str] = None) -> Path:
        """Get the cache file path for a picture date."""
        filename = f"apod_{picture_date.isoformat()}{self._extension_for(url)}"
        return self.cache_dir / filename

    def get(self, picture_date: date, url: Optional[str] = None) -> Optional[Path]:
        """
        Get a cached picture.

        Returns:
            Path of the cached file, or None if it is missing or empty
        """
        with self._lock:
            path = self.path_for(picture_date, url)
            if path.is_file() and path.stat().st_size > 0:
                logger.debug(f"Image cache hit for {picture_date}: {path}")
                return path
            return None

    def store(self, picture_date: date, url: Optional[str], data: bytes) -> Path:
        """
        Write a picture to the cache.

        The data is written to a temporary file first and moved into place,
        so a reader never sees a partially written picture.

        Raises:
            OSError: If the cache directory or file cannot be written
        """
        with self._lock:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            path = self.path_for(picture_date, url)
            fd, tmp_name = tempfile.mkstemp(dir=str(self.cache_dir), suffix=".part")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp_name, path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
            logger.info(f"Cached picture for {picture_date} ({len(data)} bytes) at {path}")
            return path

    def clear(self) -> int:
        """Delete all cached pictures. Returns number of files removed."""
        with self._lock:
            if not self.cache_dir.exists():
                return 0
            count = 0
            for f in self.cache_dir.iterdir():
                if f.is_file() and f.name.startswith("apod_"):
                    f.unlink()
                    count += 1
            logger.info(f"Cleared {count} cached pictures from {self.cache_dir}")
            return count

    def get_cache_info(self) -> Dict[str, Any]:
        """Get cache status information."""
        with self._lock:
            files = []
            if self.cache_dir.exists():
                files = [
                    f for f in self.cache_dir.iterdir()
                    if f.is_file() and f.name.startswith("apod_")
                ]
            return {
                "cache_dir": str(self.cache_dir),
                "file_count": len(files),
                "total_bytes": sum(f.stat().st_size for f in files),
            }
