"""
APOD Fetch Background Worker

Runs one gateway fetch in a background thread so the interface stays
responsive while the request and picture download are in progress.
"""

import logging
import time
from datetime import date
from typing import Optional

from PySide6.QtCore import QObject, QThread, Signal

from ..models.apod_data import FetchRequest

logger = logging.getLogger(__name__)


class APODFetchWorker(QThread):
    """
    Background worker for a single APOD fetch.

    Exactly one of ``fetch_completed`` or ``fetch_failed`` is emitted per
    run. The worker is not reused; create a new one per request.
    """

    # Signals
    fetch_completed = Signal(object)  # GatewayResult
    fetch_failed = Signal(object)  # exception raised by the fetch

    def __init__(self, gateway, request: FetchRequest, parent: Optional[QObject] = None):
        """
        Initialize the fetch worker.

        Args:
            gateway: Object with a ``fetch(date)`` method
            request: The request to run
            parent: Parent QObject
        """
        super().__init__(parent)
        self._gateway = gateway
        self._request = request

    @property
    def request(self) -> FetchRequest:
        return self._request

    def run(self):
        """Main worker thread execution."""
        picture_date = self._request.picture_date
        start_time = time.time()
        try:
            if not isinstance(picture_date, date):
                raise TypeError(
                    f"Incorrect argument type {type(picture_date).__name__}, must be a date"
                )
            result = self._gateway.fetch(picture_date)
        except BaseException as e:
            # Reported through fetch_failed; the coordinator logs it
            logger.debug(f"Background fetch for {picture_date} raised {type(e).__name__}")
            self.fetch_failed.emit(e)
            return

        logger.debug(
            f"Background fetch for {picture_date} finished in "
            f"{time.time() - start_time:.2f}s: {result!r}"
        )
        self.fetch_completed.emit(result)
