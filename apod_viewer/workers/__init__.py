"""
Worker thread package for asynchronous operations.

This package provides worker threads that keep network and disk I/O off
the interactive thread.
"""

from .apod_fetch_worker import APODFetchWorker

__all__ = [
    'APODFetchWorker'
]
