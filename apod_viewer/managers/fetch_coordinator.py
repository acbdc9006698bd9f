"""
Single-flight fetch coordinator for the APOD Viewer application.
Author: Oliver Ernster

This module owns the busy flag, dispatches at most one background fetch at
a time and turns every completed fetch into exactly one outcome for the
presentation layer. The busy flag is cleared on every exit path of the
completion handler, including failures raised by the presentation
callback.
"""

import logging
from datetime import date
from typing import Callable, Optional

from PySide6.QtCore import QMutex, QObject, Qt, Signal, Slot

from ..models.apod_data import (
    FetchOutcome,
    FetchRequest,
    GatewayResult,
    Rejected,
    RequestStatus,
    SystemFailure,
)
from ..services.response_classifier import ResponseClassifier
from ..workers.apod_fetch_worker import APODFetchWorker

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[FetchOutcome], None]


class SingleFlightCoordinator(QObject):
    """
    Coordinates APOD fetches so that only one is ever in flight.

    Implements Observer pattern through Qt signals for UI updates; an
    ``on_outcome`` callable may be given as well for drivers that do not
    use signals. Completion is always handled on the coordinator's own
    thread.
    """

    # Qt Signals for observer pattern
    outcome_ready = Signal(object)  # FetchOutcome
    busy_changed = Signal(bool)
    fetch_started = Signal(object)  # FetchRequest

    def __init__(
        self,
        gateway,
        on_outcome: Optional[OutcomeCallback] = None,
        classifier: Optional[ResponseClassifier] = None,
        worker_factory=None,
        parent: Optional[QObject] = None,
    ):
        """
        Initialize the coordinator.

        Args:
            gateway: Fetch gateway with a blocking ``fetch(date)`` method
            on_outcome: Presentation callback invoked with each outcome
            classifier: Response classifier, default ResponseClassifier
            worker_factory: Callable building a worker from (gateway, request, parent)
            parent: Parent QObject
        """
        super().__init__(parent)
        self._gateway = gateway
        self._on_outcome = on_outcome
        self._classifier = classifier or ResponseClassifier()
        self._worker_factory = worker_factory or APODFetchWorker

        self._mutex = QMutex()
        self._busy = False
        self._worker: Optional[APODFetchWorker] = None
        self._current_request: Optional[FetchRequest] = None
        self._last_outcome: Optional[FetchOutcome] = None

    @property
    def is_busy(self) -> bool:
        """Check if a fetch is in flight."""
        self._mutex.lock()
        try:
            return self._busy
        finally:
            self._mutex.unlock()

    @property
    def current_request(self) -> Optional[FetchRequest]:
        return self._current_request

    @property
    def last_outcome(self) -> Optional[FetchOutcome]:
        return self._last_outcome

    def _try_acquire(self) -> bool:
        self._mutex.lock()
        try:
            if self._busy:
                return False
            self._busy = True
            return True
        finally:
            self._mutex.unlock()

    def _release(self) -> None:
        self._mutex.lock()
        try:
            self._busy = False
        finally:
            self._mutex.unlock()

    def request_fetch(self, picture_date: date) -> RequestStatus:
        """
        Start fetching the picture for a date unless a fetch is in flight.

        Never blocks. A request made while busy is discarded, not queued.

        Args:
            picture_date: Date already validated by the caller

        Returns:
            RequestStatus: ACCEPTED if a fetch was started, BUSY otherwise
        """
        if not self._try_acquire():
            logger.info(f"Fetch for {picture_date} rejected - previous request still in progress")
            return RequestStatus.BUSY

        request = FetchRequest(picture_date=picture_date)
        try:
            worker = self._worker_factory(self._gateway, request, self)
            worker.fetch_completed.connect(
                self._on_fetch_completed, Qt.ConnectionType.QueuedConnection
            )
            worker.fetch_failed.connect(
                self._on_fetch_failed, Qt.ConnectionType.QueuedConnection
            )
            worker.finished.connect(
                self._on_worker_finished, Qt.ConnectionType.QueuedConnection
            )
            worker.finished.connect(worker.deleteLater)
            self._worker = worker
            self._current_request = request
            worker.start()
        except Exception:
            self._worker = None
            self._current_request = None
            self._release()
            raise

        logger.info(f"Fetch started for {picture_date.isoformat()}")
        self.busy_changed.emit(True)
        self.fetch_started.emit(request)
        return RequestStatus.ACCEPTED

    def request_today(self) -> RequestStatus:
        """Start fetching today's picture."""
        return self.request_fetch(date.today())

    @Slot(object)
    def _on_fetch_completed(self, result: GatewayResult):
        self._handle_completion(result=result)

    @Slot(object)
    def _on_fetch_failed(self, error: BaseException):
        self._handle_completion(error=error)

    @Slot()
    def _on_worker_finished(self):
        worker = self.sender()
        if worker is None or worker is not self._worker:
            return
        self._worker = None

        # Completion signals are queued ahead of finished, so a request still
        # owned by this worker means the thread ended without reporting.
        if self.is_busy and self._current_request is worker.request:
            self._handle_completion(
                error=RuntimeError("worker exited without a result")
            )

    def _handle_completion(
        self,
        result: Optional[GatewayResult] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        """Turn a finished fetch into an outcome and release the busy flag."""
        if not self.is_busy:
            logger.warning("Ignoring fetch completion with no request in flight")
            return

        request = self._current_request
        try:
            outcome = self._build_outcome(request, result, error)
            self._last_outcome = outcome
            self._deliver(outcome)
        finally:
            self._current_request = None
            self._release()
            self.busy_changed.emit(False)

    def _build_outcome(
        self,
        request: Optional[FetchRequest],
        result: Optional[GatewayResult],
        error: Optional[BaseException],
    ) -> FetchOutcome:
        picture_date = request.picture_date if request else None

        if error is not None:
            logger.error(
                f"Background worker error fetching APOD for {picture_date}: {error!r}",
                exc_info=(type(error), error, error.__traceback__),
            )
            return SystemFailure(f"{type(error).__name__}: {error}", error=error)

        try:
            outcome = self._classifier.classify(result)
        except Exception as e:
            logger.exception(f"Unexpected response from APOD request worker: {result!r}")
            return SystemFailure(f"{type(e).__name__}: {e}", error=e)

        if isinstance(outcome, SystemFailure):
            logger.error(f"APOD fetch for {picture_date} failed: {outcome.detail}")
        elif isinstance(outcome, Rejected):
            logger.warning(f"APOD fetch for {picture_date} rejected: {outcome.reason}")
        else:
            logger.info(f"APOD for {picture_date} ready to display")
        return outcome

    def _deliver(self, outcome: FetchOutcome) -> None:
        if self._on_outcome is not None:
            try:
                self._on_outcome(outcome)
            except Exception:
                logger.exception("Presentation callback failed while handling outcome")
        self.outcome_ready.emit(outcome)

    def wait_for_idle(self, timeout_ms: int = 5000) -> bool:
        """
        Join the in-flight worker thread.

        The busy flag itself is only cleared once the queued completion has
        been handled by the event loop.

        Returns:
            bool: True if no worker thread is left running
        """
        worker = self._worker
        if worker is None or not worker.isRunning():
            return True
        return worker.wait(timeout_ms)

    def shutdown(self, timeout_ms: int = 5000) -> bool:
        """
        Wait for an in-flight fetch thread to finish before exit.

        There is no cancellation; a fetch that is still running is left to
        complete.
        """
        if self._worker is not None:
            logger.info("Waiting for in-flight APOD fetch to finish")
        if not self.wait_for_idle(timeout_ms):
            logger.warning("APOD fetch thread did not finish in time")
            return False
        return True
