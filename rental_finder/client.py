"""
Rental search client.

Sends SearchCriteria to the proxy and turns its answer into
RentalProperty records, falling back to a synthetic error-marker listing
when the answer cannot be interpreted.
"""

import logging
from typing import List, Optional

import httpx

from rental_finder.config import Settings
from rental_finder.decoding import decode_properties
from rental_finder.errors import FormatError, NetworkError, ServerError
from rental_finder.models.rental import (
    ERROR_MARKER_SOURCE,
    RentalProperty,
    SearchCriteria,
    coerce_count,
)

logger = logging.getLogger(__name__)

FIND_RENTALS_PATH = "/api/findRentals"
GENERIC_SERVER_ERROR = "Failed to fetch rental properties from the server."


def error_marker(criteria: SearchCriteria, error: FormatError) -> RentalProperty:
    """Build the placeholder listing shown when a response cannot be read."""
    return RentalProperty(
        title="Parsing Error",
        price=f"${criteria.min_price or '0'} - ${criteria.max_price or '?'}",
        bedrooms=coerce_count(criteria.bedrooms),
        bathrooms=coerce_count(criteria.bathrooms),
        location=criteria.location,
        source=ERROR_MARKER_SOURCE,
        url="#",
        description=f"{error.message} Raw response: {error.text}...",
    )


class RentalSearchClient:
    """Client for the rental search proxy."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Root URL of the proxy, e.g. ``http://localhost:8000``.
            timeout: Request timeout in seconds.
            http_client: Pre-built httpx client, mainly for tests.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "RentalSearchClient":
        return cls(settings.api_base_url, timeout=settings.request_timeout)

    def _post(self, payload: dict) -> httpx.Response:
        url = f"{self.base_url}{FIND_RENTALS_PATH}"
        if self._client is not None:
            return self._client.post(url, json=payload, timeout=self.timeout)
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(url, json=payload)

    def search(self, criteria: SearchCriteria, strict: bool = False) -> List[RentalProperty]:
        """
        Search for rentals matching ``criteria``.

        Args:
            criteria: Search criteria from the form.
            strict: Raise FormatError instead of returning the error marker.

        Returns:
            The decoded listings; possibly empty when nothing matched, or a
            single error-marker listing when the response was unreadable.

        Raises:
            NetworkError: If the proxy could not be reached.
            ServerError: If the proxy answered with a non-success status.
            FormatError: Only in strict mode.
        """
        payload = criteria.to_payload()
        logger.info("Searching rentals: %s", payload)

        try:
            response = self._post(payload)
        except httpx.TransportError as e:
            logger.error("Failed to reach rental search proxy: %s", e)
            raise NetworkError("An unexpected network error occurred.") from e

        if response.is_error:
            raise ServerError(self._error_message(response), status_code=response.status_code)

        try:
            body = response.json()
            properties = decode_properties(body)
        except ValueError as e:
            error = FormatError(
                "The server response was not valid JSON.",
                text=response.text[:200],
            )
            if strict:
                raise error from e
            logger.warning("Proxy returned a non-JSON body: %s", error.text)
            return [error_marker(criteria, error)]
        except FormatError as e:
            if strict:
                raise
            return [error_marker(criteria, e)]

        logger.info("Decoded %d properties", len(properties))
        return properties

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        message = body.get("message") if isinstance(body, dict) else None
        if isinstance(message, str) and message:
            logger.error("Proxy error %s: %s", response.status_code, message)
            return message
        logger.error("Proxy error %s without a message body", response.status_code)
        return GENERIC_SERVER_ERROR
