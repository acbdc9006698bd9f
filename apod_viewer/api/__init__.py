"""
API integration for the APOD Viewer application.

This module handles communication with the NASA APOD API,
including error mapping, picture download and response parsing.
"""

from .apod_api_manager import (
    APODAPIException,
    APODAuthenticationException,
    APODDataException,
    APODGateway,
    APODGatewayFactory,
    APODNetworkException,
    APODRateLimitException,
    AioHttpClient,
    FetchGateway,
    HTTPClient,
)

__all__ = [
    "APODAPIException",
    "APODAuthenticationException",
    "APODDataException",
    "APODGateway",
    "APODGatewayFactory",
    "APODNetworkException",
    "APODRateLimitException",
    "AioHttpClient",
    "FetchGateway",
    "HTTPClient",
]
