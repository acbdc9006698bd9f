"""
Tests for the background APOD fetch worker.
"""

import asyncio
from datetime import date

import pytest
from PySide6.QtCore import QCoreApplication

from apod_viewer.models.apod_data import FetchError, FetchRequest, FetchSuccess
from apod_viewer.workers.apod_fetch_worker import APODFetchWorker


def run_worker(worker, catch_signal):
    completed = catch_signal(worker.fetch_completed)
    failed = catch_signal(worker.fetch_failed)
    worker.start()
    assert worker.wait(5000)
    # Deliver the queued emissions
    QCoreApplication.processEvents()
    return completed.received, failed.received


class TestAPODFetchWorker:
    """Test APODFetchWorker emissions."""

    def test_success_emits_completed_once(self, success_gateway, catch_signal, picture_date):
        worker = APODFetchWorker(success_gateway, FetchRequest(picture_date))

        completed, failed = run_worker(worker, catch_signal)

        assert len(completed) == 1
        assert isinstance(completed[0][0], FetchSuccess)
        assert failed == []
        assert success_gateway.calls == [picture_date]

    def test_gateway_error_value_is_completion(self, error_gateway, catch_signal, picture_date):
        worker = APODFetchWorker(error_gateway, FetchRequest(picture_date))

        completed, failed = run_worker(worker, catch_signal)

        assert completed == [(FetchError("rate limited"),)]
        assert failed == []

    def test_exception_emits_failed_once(self, make_gateway, catch_signal, picture_date):
        gateway = make_gateway(error=ConnectionResetError("reset by peer"))
        worker = APODFetchWorker(gateway, FetchRequest(picture_date))

        completed, failed = run_worker(worker, catch_signal)

        assert completed == []
        assert len(failed) == 1
        assert isinstance(failed[0][0], ConnectionResetError)

    @pytest.mark.parametrize("error", [asyncio.CancelledError(), SystemExit(3)])
    def test_base_exception_emits_failed(self, make_gateway, catch_signal, picture_date, error):
        worker = APODFetchWorker(make_gateway(error=error), FetchRequest(picture_date))

        completed, failed = run_worker(worker, catch_signal)

        assert completed == []
        assert failed == [(error,)]

    def test_non_date_argument_fails_without_calling_gateway(
        self, success_gateway, catch_signal
    ):
        worker = APODFetchWorker(success_gateway, FetchRequest("2020-07-04"))

        completed, failed = run_worker(worker, catch_signal)

        assert completed == []
        assert isinstance(failed[0][0], TypeError)
        assert "must be a date" in str(failed[0][0])
        assert success_gateway.calls == []

    def test_request_property(self, success_gateway, qapp):
        request = FetchRequest(date(2020, 7, 4))
        worker = APODFetchWorker(success_gateway, request)
        assert worker.request is request
