from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


logger = logging.getLogger(__name__)


class TransportError(RuntimeError):
    """Base error for HTTP transport failures."""


class TransportTimeout(TransportError):
    """Raised when request times out."""


class TransportHTTPError(TransportError):
    """Raised for non-success HTTP responses."""

    def __init__(self, message: str, status_code: int, url: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class HTTPClient(Protocol):
    """Contract the ShipPrimus services depend on. Both calls return parsed JSON."""

    def get_json(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any: ...

    def post_json(
        self,
        endpoint: str,
        payload: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any: ...


class BaseAPIClient:
    """
    Reusable JSON-over-HTTP client.

    Features:
    - Persistent session (injectable for tests)
    - Default headers
    - Optional retry with exponential backoff
    - Configurable timeout
    - Safe JSON parsing
    """

    DEFAULT_TIMEOUT = 15  # seconds
    DEFAULT_RETRIES = 0
    DEFAULT_BACKOFF_FACTOR = 0.5

    def __init__(
        self,
        base_url: str,
        default_headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        backoff_factor: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT
        if self.timeout <= 0:
            raise ValueError(f"timeout must be greater than zero, got {self.timeout}")

        if session is not None:
            self.session = session
        else:
            self.session = requests.Session()

            # Retry strategy
            retry_strategy = Retry(
                total=retries if retries is not None else self.DEFAULT_RETRIES,
                backoff_factor=backoff_factor if backoff_factor is not None else self.DEFAULT_BACKOFF_FACTOR,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["GET"],
                raise_on_status=False,
            )

            adapter = HTTPAdapter(max_retries=retry_strategy)
            self.session.mount("https://", adapter)
            self.session.mount("http://", adapter)

        # Default headers
        headers = {
            "User-Agent": "FreightRates/1.0",
            "Accept": "application/json",
        }

        if default_headers:
            headers.update(default_headers)

        self.session.headers.update(headers)

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    # ---------------------------------------------------
    # Core request methods
    # ---------------------------------------------------
    def get_json(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Send GET request and return parsed JSON.
        Raises clean, structured errors.
        """
        url = self._url(endpoint)
        return self._send("GET", url, params=params, headers=headers)

    def post_json(
        self,
        endpoint: str,
        payload: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Send POST request with a JSON body and return parsed JSON."""
        url = self._url(endpoint)
        return self._send("POST", url, json=payload, headers=headers)

    def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.Timeout as e:
            raise TransportTimeout(
                f"Request timed out calling {url}"
            ) from e
        except requests.RequestException as e:
            raise TransportError(
                f"Request failed calling {url}"
            ) from e

        if response.status_code >= 400:
            logger.debug(f"{method} {url} returned HTTP {response.status_code}")
            raise TransportHTTPError(
                f"HTTP {response.status_code} returned from {url}",
                status_code=response.status_code,
                url=url,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON returned from {url}"
            ) from e
