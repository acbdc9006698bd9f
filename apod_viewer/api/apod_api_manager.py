"""
NASA APOD API manager for fetching the Astronomy Picture of the Day.
Author: Oliver Ernster

This module handles all communication with the APOD API and the download
of the picture into the local image cache. Expected failures (bad date,
rate limiting, no network) are returned as ``FetchError`` values; anything
else is raised for the caller to treat as a system failure.
"""

import asyncio
import dataclasses
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Union

import aiohttp

from version import get_user_agent
from ..cache.image_cache import ImageCache
from ..managers.apod_config import APODConfig
from ..models.apod_data import (
    FetchError,
    FetchSuccess,
    GatewayResult,
    PictureRecord,
)

logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = (
    "Error connecting to the NASA APOD service. Check your internet connection."
)
RATE_LIMIT_MESSAGE = "NASA API rate limit exceeded. Try again later."
INVALID_KEY_MESSAGE = "Invalid NASA API key"


class APODAPIException(Exception):
    """Base exception for APOD API-related errors."""

    pass


class APODNetworkException(APODAPIException):
    """Exception for network-related errors."""

    pass


class APODDataException(APODAPIException):
    """Exception for malformed or unexpected API data."""

    pass


class APODRateLimitException(APODAPIException):
    """Exception for rate limit exceeded errors."""

    pass


class APODAuthenticationException(APODAPIException):
    """Exception for API authentication errors."""

    pass


@dataclass
class APODAPIResponse:
    """Container for a raw API response."""

    status_code: int
    data: Union[Dict[str, Any], List[Any], bytes, None]
    timestamp: datetime
    url: str


class HTTPClient(ABC):
    """Abstract HTTP client interface for dependency injection."""

    @abstractmethod
    async def get_json(self, url: str, params: Dict[str, Any]) -> APODAPIResponse:
        """Make HTTP GET request and decode the JSON body."""
        pass

    @abstractmethod
    async def get_bytes(self, url: str) -> APODAPIResponse:
        """Make HTTP GET request and return the raw body."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close HTTP client."""
        pass


class AioHttpClient(HTTPClient):
    """
    Concrete HTTP client implementation using aiohttp.

    A client is bound to the event loop it first runs in, so callers create
    one per fetch and close it when done.
    """

    def __init__(self, timeout_seconds: int = 15):
        """Initialize HTTP client with timeout."""
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout, headers={"User-Agent": get_user_agent()}
            )
        return self._session

    async def get_json(self, url: str, params: Dict[str, Any]) -> APODAPIResponse:
        """
        Make HTTP GET request and decode the JSON body.

        Error responses with an undecodable body get ``data=None``; a
        successful response with an undecodable body is a data error.
        """
        session = await self._ensure_session()

        try:
            async with session.get(url, params=params) as response:
                text = await response.text()
                try:
                    data = json.loads(text) if text else None
                except json.JSONDecodeError as e:
                    if response.status == 200:
                        raise APODDataException(f"Invalid JSON response: {e}")
                    data = None
                return APODAPIResponse(
                    status_code=response.status,
                    data=data,
                    timestamp=datetime.now(),
                    url=str(response.url),
                )
        except APODAPIException:
            raise
        except aiohttp.ClientError as e:
            raise APODNetworkException(f"Network error: {e}")
        except asyncio.TimeoutError:
            raise APODNetworkException(f"Request to {url} timed out")

    async def get_bytes(self, url: str) -> APODAPIResponse:
        """Make HTTP GET request and return the raw body."""
        session = await self._ensure_session()

        try:
            async with session.get(url) as response:
                body = await response.read()
                return APODAPIResponse(
                    status_code=response.status,
                    data=body,
                    timestamp=datetime.now(),
                    url=str(response.url),
                )
        except aiohttp.ClientError as e:
            raise APODNetworkException(f"Network error: {e}")
        except asyncio.TimeoutError:
            raise APODNetworkException(f"Download of {url} timed out")

    async def close(self) -> None:
        """Close HTTP client."""
        if self._session and not self._session.closed:
            await self._session.close()


class FetchGateway(ABC):
    """
    Capability that fetches picture metadata and caches the picture.

    ``fetch`` blocks until done and is only called off the interactive
    thread. Expected failures come back as ``FetchError``; an exception
    means something unrecoverable went wrong.
    """

    @abstractmethod
    def fetch(self, picture_date: date) -> GatewayResult:
        """Fetch the picture for a date."""
        pass


class APODGateway(FetchGateway):
    """Fetch gateway backed by the NASA APOD API."""

    def __init__(
        self,
        config: APODConfig,
        image_cache: ImageCache,
        client_factory: Optional[Callable[[], HTTPClient]] = None,
    ):
        self._config = config
        self._image_cache = image_cache
        self._client_factory = client_factory or (
            lambda: AioHttpClient(timeout_seconds=config.timeout_seconds)
        )

    def fetch(self, picture_date: date) -> GatewayResult:
        """Fetch the picture for a date in a private event loop."""
        return asyncio.run(self.fetch_async(picture_date))

    async def fetch_async(self, picture_date: date) -> GatewayResult:
        """
        Fetch picture metadata and, for images, the picture itself.

        Raises:
            APODDataException: If the API returned data that cannot be used
            OSError: If the picture cannot be written to the cache
        """
        logger.info(f"Fetching APOD for {picture_date.isoformat()}")
        client = self._client_factory()
        try:
            return await self._fetch_with_client(client, picture_date)
        except APODNetworkException as e:
            logger.warning(f"Network failure fetching APOD for {picture_date}: {e}")
            return FetchError(NETWORK_ERROR_MESSAGE)
        except APODRateLimitException as e:
            logger.warning(f"APOD rate limit hit: {e}")
            return FetchError(RATE_LIMIT_MESSAGE)
        except APODAuthenticationException as e:
            logger.warning(f"APOD authentication failed: {e}")
            return FetchError(INVALID_KEY_MESSAGE)
        finally:
            await client.close()

    async def _fetch_with_client(
        self, client: HTTPClient, picture_date: date
    ) -> GatewayResult:
        params = {
            "api_key": self._config.nasa_api_key,
            "date": picture_date.isoformat(),
        }
        response = await client.get_json(self._config.base_url, params)

        if response.status_code != 200:
            return self._handle_error_status(response)

        if not isinstance(response.data, dict):
            raise APODDataException(
                f"APOD API returned unexpected data type: {type(response.data).__name__}"
            )

        try:
            record = PictureRecord.from_api(response.data)
        except KeyError as e:
            raise APODDataException(f"APOD response missing field {e}")

        if not record.is_image:
            logger.info(f"APOD for {picture_date} is not an image ({response.data.get('media_type')})")
            return FetchSuccess(record)

        image_url = self._select_image_url(response.data)
        cached = self._image_cache.get(picture_date, image_url)
        if cached is None:
            download = await client.get_bytes(image_url)
            if download.status_code != 200 or not download.data:
                logger.warning(
                    f"Picture download failed for {picture_date}: status {download.status_code}"
                )
                return FetchError(
                    f"Unable to download the picture (status {download.status_code})"
                )
            cached = self._image_cache.store(picture_date, image_url, download.data)

        return FetchSuccess(dataclasses.replace(record, image_path=str(cached)))

    def _select_image_url(self, data: Dict[str, Any]) -> str:
        url = data.get("url")
        if self._config.hd_images and data.get("hdurl"):
            url = data["hdurl"]
        if not url:
            raise APODDataException("APOD image response has no picture URL")
        return url

    def _handle_error_status(self, response: APODAPIResponse) -> FetchError:
        """
        Map a non-200 response to a user-facing error.

        Raises:
            APODAuthenticationException: For 403 responses
            APODRateLimitException: For 429 responses
        """
        status = response.status_code
        if status == 403:
            raise APODAuthenticationException(INVALID_KEY_MESSAGE)
        if status == 429:
            raise APODRateLimitException(RATE_LIMIT_MESSAGE)

        message = self._extract_error_message(response.data)
        logger.warning(f"APOD API returned status {status}: {message}")
        if status in (400, 404) and message:
            return FetchError(message)
        return FetchError(f"NASA APOD service returned status {status}")

    @staticmethod
    def _extract_error_message(data: Any) -> Optional[str]:
        """Pull the message out of either APOD error body shape."""
        if not isinstance(data, dict):
            return None
        if data.get("msg"):
            return str(data["msg"])
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return None


class APODGatewayFactory:
    """
    Factory for creating fetch gateways.

    Implements Factory pattern for easy instantiation.
    """

    @staticmethod
    def create_gateway(config: APODConfig) -> APODGateway:
        """Create a gateway using the NASA APOD API."""
        image_cache = ImageCache(config.cache_directory)
        return APODGateway(config, image_cache)
