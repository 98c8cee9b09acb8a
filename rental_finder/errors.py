"""
Error taxonomy shared by the proxy, the client and the UI.
"""

from typing import Any, Optional


class RentalFinderError(Exception):
    """Base class for all application errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RentalFinderError):
    """The request is missing required fields or carries malformed ones."""


class ServerConfigurationError(RentalFinderError):
    """The proxy is missing configuration it needs, e.g. the API key."""


class UpstreamError(RentalFinderError):
    """The completion service returned a non-success result or was unreachable."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class FormatError(RentalFinderError):
    """A success payload could not be interpreted as a property list."""

    def __init__(self, message: str, text: str = "") -> None:
        super().__init__(message)
        self.text = text


class NetworkError(RentalFinderError):
    """The client could not reach the proxy."""


class ServerError(RentalFinderError):
    """The proxy answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
