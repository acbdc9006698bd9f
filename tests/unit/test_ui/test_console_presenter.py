"""
Tests for the console presenter.
"""

import dataclasses
import io

import pytest

from apod_viewer.models.apod_data import (
    GENERIC_FAILURE_MESSAGE,
    Displayable,
    Rejected,
    SystemFailure,
)
from apod_viewer.ui.console_presenter import (
    BUSY_NOTICE,
    PROGRESS_NOTICE,
    ConsolePresenter,
)


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def presenter(stream):
    return ConsolePresenter(stream, width=40)


def displayable(record, credit_line="Image credit: Dario Giannobile"):
    return Displayable(
        record=record, credit_line=credit_line, long_date="Saturday, July 4, 2020"
    )


class TestConsolePresenter:
    """Test ConsolePresenter output."""

    def test_picture_details(self, presenter, stream, sample_record):
        presenter.present(displayable(sample_record))

        lines = stream.getvalue().splitlines()
        assert lines[:3] == [
            "Comet NEOWISE over the Adriatic",
            "Image credit: Dario Giannobile",
            "Saturday, July 4, 2020",
        ]
        assert "Comet NEOWISE rises before dawn." in lines
        assert lines[-1] == f"Picture: {sample_record.image_path}"

    def test_empty_credit_line_is_omitted(self, presenter, stream, sample_record):
        presenter.present(displayable(sample_record, credit_line=""))

        lines = stream.getvalue().splitlines()
        assert lines[1] == "Saturday, July 4, 2020"

    def test_explanation_is_wrapped(self, presenter, stream, sample_record):
        record = dataclasses.replace(sample_record, explanation="word " * 40)
        presenter.present(displayable(record))

        assert all(len(line) <= 40 for line in stream.getvalue().splitlines()[4:-2])

    def test_missing_picture_file(self, presenter, stream, sample_record, tmp_path):
        record = dataclasses.replace(sample_record, image_path=str(tmp_path / "gone.jpg"))
        presenter.present(displayable(record))

        assert stream.getvalue().splitlines()[-1] == "Picture: unavailable"

    def test_rejected(self, presenter, stream):
        presenter.present(Rejected("not an image"))
        assert stream.getvalue() == "Sorry! not an image\n"

    def test_system_failure_hides_detail(self, presenter, stream, caplog):
        presenter.present(SystemFailure("KeyError: 'date'", error=KeyError("date")))

        assert stream.getvalue() == f"Error: {GENERIC_FAILURE_MESSAGE}\n"
        # Logged once by the coordinator, not again here
        assert "KeyError" not in caplog.text

    def test_unknown_outcome(self, presenter):
        with pytest.raises(TypeError):
            presenter.present("not an outcome")

    def test_progress_and_busy_notices(self, presenter, stream):
        presenter.on_busy_changed(True)
        presenter.on_busy_changed(False)
        presenter.show_busy_notice()

        assert stream.getvalue().splitlines() == [PROGRESS_NOTICE, BUSY_NOTICE]
