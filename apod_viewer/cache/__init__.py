"""
Caching for downloaded pictures.

This package keeps one picture file per APOD date on disk.
"""

from .image_cache import ImageCache, get_default_cache_dir

__all__ = [
    'ImageCache',
    'get_default_cache_dir'
]
