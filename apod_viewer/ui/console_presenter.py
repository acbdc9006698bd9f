"""
Console presentation of APOD fetch outcomes.

Stands in for the picture form when the viewer is driven from the command
line: shows progress while a fetch is in flight, the picture details when
one is ready, and a short notice for everything else.
"""

import logging
import sys
import textwrap
from pathlib import Path
from typing import Optional, TextIO

from ..models.apod_data import Displayable, FetchOutcome, Rejected, SystemFailure

logger = logging.getLogger(__name__)

BUSY_NOTICE = "Please wait for previous request to complete."
PROGRESS_NOTICE = "Fetching picture..."


class ConsolePresenter:
    """Renders fetch outcomes to a text stream."""

    def __init__(self, stream: Optional[TextIO] = None, width: int = 78):
        self._stream = stream or sys.stdout
        self._width = width

    def _write(self, text: str = "") -> None:
        self._stream.write(f"{text}\n")
        self._stream.flush()

    def on_busy_changed(self, busy: bool) -> None:
        """Show or clear the progress notice."""
        if busy:
            self._write(PROGRESS_NOTICE)

    def show_busy_notice(self) -> None:
        self._write(BUSY_NOTICE)

    def present(self, outcome: FetchOutcome) -> None:
        """Render one outcome."""
        if isinstance(outcome, Displayable):
            self._show_picture(outcome)
        elif isinstance(outcome, Rejected):
            self._write(f"Sorry! {outcome.reason}")
        elif isinstance(outcome, SystemFailure):
            # Detail is logged where the failure was converted
            self._write(f"Error: {outcome.user_message}")
        else:
            raise TypeError(f"Unknown outcome type: {type(outcome).__name__}")

    def _show_picture(self, outcome: Displayable) -> None:
        record = outcome.record
        self._write(record.title)
        if outcome.credit_line:
            self._write(outcome.credit_line)
        self._write(outcome.long_date)
        self._write()
        for paragraph in record.explanation.splitlines():
            self._write(textwrap.fill(paragraph, width=self._width) if paragraph else "")
        self._write()

        image_path = record.image_path
        if image_path and Path(image_path).is_file():
            self._write(f"Picture: {image_path}")
        else:
            logger.warning(f"Error loading image for {record.date_text}: {image_path} not found")
            self._write("Picture: unavailable")
