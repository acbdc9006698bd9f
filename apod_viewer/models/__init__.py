"""
Data models for the APOD Viewer application.

This module contains the picture record, gateway result and fetch
outcome types shared across the application.
"""

from .apod_data import (
    APOD_START_DATE,
    GENERIC_FAILURE_MESSAGE,
    NOT_AN_IMAGE_REASON,
    Displayable,
    FetchError,
    FetchOutcome,
    FetchRequest,
    FetchSuccess,
    GatewayResult,
    MediaKind,
    PictureRecord,
    Rejected,
    RequestStatus,
    SystemFailure,
    is_valid_apod_date,
)

__all__ = [
    "APOD_START_DATE",
    "GENERIC_FAILURE_MESSAGE",
    "NOT_AN_IMAGE_REASON",
    "Displayable",
    "FetchError",
    "FetchOutcome",
    "FetchRequest",
    "FetchSuccess",
    "GatewayResult",
    "MediaKind",
    "PictureRecord",
    "Rejected",
    "RequestStatus",
    "SystemFailure",
    "is_valid_apod_date",
]
