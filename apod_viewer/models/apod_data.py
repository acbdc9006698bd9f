"""
APOD data models for the APOD Viewer application.
Author: Oliver Ernster

This module contains immutable data classes describing a picture record,
the result returned by a fetch gateway and the classified outcome handed
to the presentation layer.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

# First day an Astronomy Picture of the Day was published
APOD_START_DATE = date(1995, 6, 16)

GENERIC_FAILURE_MESSAGE = "Unexpected error fetching data"
NOT_AN_IMAGE_REASON = "not an image"


def is_valid_apod_date(value: date, today: Optional[date] = None) -> bool:
    """
    Check whether a picture exists for the given date.

    Args:
        value: Requested picture date
        today: Upper bound, defaults to the current local date

    Returns:
        bool: True if value lies within [1995-06-16, today]
    """
    if isinstance(value, datetime):
        value = value.date()
    upper = today or date.today()
    return APOD_START_DATE <= value <= upper


class MediaKind(Enum):
    """Kind of media published for a date."""

    IMAGE = "image"
    OTHER = "other"

    @classmethod
    def from_api(cls, media_type: Optional[str]) -> "MediaKind":
        """Map the API ``media_type`` field onto a media kind."""
        if media_type and media_type.strip().lower() == "image":
            return cls.IMAGE
        return cls.OTHER


class RequestStatus(Enum):
    """Immediate answer to a fetch request."""

    ACCEPTED = "accepted"
    BUSY = "busy"


@dataclass(frozen=True)
class FetchRequest:
    """A single request for the picture of one date."""

    picture_date: date
    requested_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class PictureRecord:
    """
    Immutable picture metadata returned by a fetch gateway.

    ``image_path`` points at the locally cached picture and is only
    meaningful when ``media_kind`` is ``MediaKind.IMAGE``.
    """

    title: str
    credit: str
    date_text: str
    explanation: str
    media_kind: MediaKind
    image_path: Optional[str] = None
    source_url: Optional[str] = None

    @property
    def is_image(self) -> bool:
        return self.media_kind is MediaKind.IMAGE

    @classmethod
    def from_api(
        cls, data: Dict[str, Any], image_path: Optional[str] = None
    ) -> "PictureRecord":
        """
        Build a record from an APOD API JSON object.

        Raises:
            KeyError: If the object has no ``date`` field
        """
        media_kind = MediaKind.from_api(data.get("media_type"))
        return cls(
            title=data.get("title") or "",
            credit=data.get("copyright") or "",
            date_text=data["date"],
            explanation=data.get("explanation") or "",
            media_kind=media_kind,
            image_path=image_path if media_kind is MediaKind.IMAGE else None,
            source_url=data.get("hdurl") or data.get("url"),
        )


@dataclass(frozen=True)
class FetchSuccess:
    """Gateway returned a populated record."""

    record: PictureRecord


@dataclass(frozen=True)
class FetchError:
    """Gateway reported an expected, user-facing error."""

    message: str


GatewayResult = Union[FetchSuccess, FetchError]


@dataclass(frozen=True)
class Displayable:
    """A picture ready to be shown."""

    record: PictureRecord
    credit_line: str
    long_date: str


@dataclass(frozen=True)
class Rejected:
    """An expected failure whose reason is shown verbatim to the user."""

    reason: str


@dataclass(frozen=True)
class SystemFailure:
    """
    An unanticipated failure.

    ``detail`` is meant for diagnostics only; users are shown
    ``user_message``.
    """

    detail: str
    error: Optional[BaseException] = field(default=None, compare=False)

    @property
    def user_message(self) -> str:
        return GENERIC_FAILURE_MESSAGE


FetchOutcome = Union[Displayable, Rejected, SystemFailure]
