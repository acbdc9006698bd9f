"""
Presentation layer for the APOD Viewer application.
"""

from .console_presenter import BUSY_NOTICE, PROGRESS_NOTICE, ConsolePresenter

__all__ = ["BUSY_NOTICE", "PROGRESS_NOTICE", "ConsolePresenter"]
