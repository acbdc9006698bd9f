"""
Response classification for APOD fetches.
Author: Oliver Ernster

Turns the result of a gateway call into a fetch outcome and prepares the
display text (credit line, long date) for pictures that can be shown.
Everything here is pure: no I/O and no shared state.
"""

import logging
from datetime import date

from ..models.apod_data import (
    NOT_AN_IMAGE_REASON,
    Displayable,
    FetchError,
    FetchOutcome,
    FetchSuccess,
    GatewayResult,
    Rejected,
    SystemFailure,
)

logger = logging.getLogger(__name__)

CREDIT_LABEL = "Image credit: "

_WEEKDAYS = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)
_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def normalize_credit(text: str) -> str:
    """
    Clean up copyright text from the API.

    Line breaks become single spaces and any embedded "Image credit: "
    phrase is removed so the label is not doubled when re-added.
    """
    if not text:
        return ""
    cleaned = text.replace("\r\n", " ").replace("\r", " ").replace("\n", " ")
    cleaned = cleaned.replace(CREDIT_LABEL, "")
    return cleaned.strip()


def format_credit_line(text: str) -> str:
    """Get the labelled credit line, or an empty string if there is no credit."""
    credit = normalize_credit(text)
    if not credit:
        return ""
    return f"{CREDIT_LABEL}{credit}"


def format_long_date(text: str) -> str:
    """
    Format an ISO date as e.g. "Saturday, July 4, 2020".

    Raises:
        ValueError: If text is not a YYYY-MM-DD date
    """
    parsed = date.fromisoformat(text.strip())
    weekday = _WEEKDAYS[parsed.weekday()]
    month = _MONTHS[parsed.month - 1]
    return f"{weekday}, {month} {parsed.day}, {parsed.year}"


def classify(result: GatewayResult) -> FetchOutcome:
    """
    Classify a gateway result.

    Decision order: gateway error, non-image media, unparseable date,
    displayable picture.
    """
    if isinstance(result, FetchError):
        return Rejected(result.message)

    if not isinstance(result, FetchSuccess):
        return SystemFailure(f"Unexpected gateway result: {result!r}")

    record = result.record
    if not record.is_image:
        return Rejected(NOT_AN_IMAGE_REASON)

    try:
        long_date = format_long_date(record.date_text)
    except (ValueError, TypeError, AttributeError) as e:
        return SystemFailure(
            f"Invalid picture date {record.date_text!r} for {record.title!r}: {e}",
            error=e,
        )

    return Displayable(
        record=record,
        credit_line=format_credit_line(record.credit),
        long_date=long_date,
    )


class ResponseClassifier:
    """Injectable wrapper around :func:`classify`."""

    def classify(self, result: GatewayResult) -> FetchOutcome:
        return classify(result)
