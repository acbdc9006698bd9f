"""
Global pytest configuration and fixtures.
"""

import threading
from datetime import date

import pytest
from PySide6.QtCore import QCoreApplication, QEventLoop, QObject, QTimer

from apod_viewer.models.apod_data import (
    FetchError,
    FetchSuccess,
    MediaKind,
    PictureRecord,
)


@pytest.fixture(scope="session")
def qapp():
    """Create QCoreApplication instance for tests that need an event loop."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


class SignalCatcher(QObject):
    """Records emissions of a signal and can spin the event loop until enough arrive."""

    def __init__(self, signal):
        super().__init__()
        self.received = []
        self._loop = QEventLoop()
        signal.connect(self._on_signal)

    def _on_signal(self, *args):
        self.received.append(args)
        self._loop.quit()

    def wait(self, count: int = 1, timeout_ms: int = 5000):
        timer = QTimer()
        timer.setSingleShot(True)
        timer.timeout.connect(self._loop.quit)
        timer.start(timeout_ms)
        while len(self.received) < count and timer.isActive():
            self._loop.exec()
        timer.stop()
        return self.received


class StubGateway:
    """Fetch gateway returning a canned result or raising a canned error."""

    def __init__(self, result=None, error=None, gate: threading.Event = None):
        self.result = result
        self.error = error
        self.gate = gate
        self.calls = []

    def fetch(self, picture_date):
        self.calls.append(picture_date)
        if self.gate is not None:
            self.gate.wait(5)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def sample_record(tmp_path):
    """Provide an image record whose picture exists on disk."""
    image_path = tmp_path / "apod_2020-07-04.jpg"
    image_path.write_bytes(b"\xff\xd8\xff\xe0fakejpeg")
    return PictureRecord(
        title="Comet NEOWISE over the Adriatic",
        credit="Image credit: Dario Giannobile\n(Astronomy Club)",
        date_text="2020-07-04",
        explanation="Comet NEOWISE rises before dawn.",
        media_kind=MediaKind.IMAGE,
        image_path=str(image_path),
        source_url="https://apod.nasa.gov/apod/image/2007/neowise.jpg",
    )


@pytest.fixture
def video_record():
    """Provide a record for a date that published a video."""
    return PictureRecord(
        title="Moon Rotation",
        credit="",
        date_text="2020-07-05",
        explanation="A video of the Moon.",
        media_kind=MediaKind.OTHER,
        source_url="https://www.youtube.com/embed/abc",
    )


@pytest.fixture
def apod_image_payload():
    """Provide an APOD API JSON body for an image."""
    return {
        "copyright": "Dario Giannobile",
        "date": "2020-07-04",
        "explanation": "Comet NEOWISE rises before dawn.",
        "hdurl": "https://apod.nasa.gov/apod/image/2007/neowise_hd.jpg",
        "media_type": "image",
        "service_version": "v1",
        "title": "Comet NEOWISE over the Adriatic",
        "url": "https://apod.nasa.gov/apod/image/2007/neowise.jpg",
    }


@pytest.fixture
def apod_video_payload():
    """Provide an APOD API JSON body for a video."""
    return {
        "date": "2020-07-05",
        "explanation": "A video of the Moon.",
        "media_type": "video",
        "service_version": "v1",
        "title": "Moon Rotation",
        "url": "https://www.youtube.com/embed/abc",
    }


@pytest.fixture
def picture_date():
    return date(2020, 7, 4)


@pytest.fixture
def success_gateway(sample_record):
    return StubGateway(result=FetchSuccess(sample_record))


@pytest.fixture
def error_gateway():
    return StubGateway(result=FetchError("rate limited"))


@pytest.fixture
def catch_signal(qapp):
    """Factory attaching a SignalCatcher to a signal."""
    return SignalCatcher


@pytest.fixture
def make_gateway():
    """Factory building a StubGateway."""
    return StubGateway
