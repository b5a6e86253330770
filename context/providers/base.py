# context/providers/base.py
"""
Base Context Provider Interface

All providers implement this interface so the service layer can cache
and fall back uniformly. Providers raise ContextError subclasses on
failure; the service decides what to serve instead.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from context.errors import MalformedPayloadError, UpstreamUnavailableError

_logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
USER_AGENT = "waiver-context/0.1"


class ContextProvider(ABC):
    """
    Abstract base class for context data providers.

    Each provider:
    1. Fetches data from an external source (or bundled sample data)
    2. Parses the response
    3. Normalizes it into the context data model
    """

    def __init__(self, use_live_data: bool = False, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self._use_live_data = use_live_data
        self._timeout = timeout

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Identifier for this data source."""
        ...

    @abstractmethod
    async def fetch(self, *args: Any, **kwargs: Any) -> Any:
        """
        Fetch and return normalized data.

        Raises:
            UpstreamUnavailableError: network failure or non-200 response
            MalformedPayloadError: payload unusable
        """
        ...

    @property
    def use_live_data(self) -> bool:
        return self._use_live_data


async def fetch_response(
    url: str,
    params: Optional[dict] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> httpx.Response:
    """
    GET a URL, translating transport failures into UpstreamUnavailableError.
    """
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(
                url,
                params=params,
                headers={"User-Agent": USER_AGENT},
            )
    except httpx.TimeoutException as e:
        _logger.warning(f"Request to {url} timed out")
        raise UpstreamUnavailableError(f"Request to {url} timed out") from e
    except httpx.RequestError as e:
        _logger.warning(f"Request to {url} failed: {e}")
        raise UpstreamUnavailableError(f"Request to {url} failed: {e}") from e

    if response.status_code != 200:
        _logger.warning(f"{url} returned {response.status_code}")
        raise UpstreamUnavailableError(
            f"{url} responded {response.status_code}",
            status_code=response.status_code,
        )
    return response


async def fetch_json(
    url: str,
    params: Optional[dict] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Any:
    """GET a URL and decode its JSON body."""
    response = await fetch_response(url, params=params, timeout=timeout)
    try:
        return response.json()
    except ValueError as e:
        raise MalformedPayloadError(f"{url} returned invalid JSON") from e
