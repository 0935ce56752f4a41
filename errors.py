"""
Exception hierarchy for the Pocket client.
Every failure raised by this package derives from PocketError.
"""

from typing import Optional


class PocketError(Exception):
    """Base class for all Pocket client errors."""


class ValidationError(PocketError):
    """Caller input rejected before any network access."""


class EncodingError(PocketError):
    """Request body could not be serialized to JSON."""


class DecodingError(PocketError):
    """Response body was not a JSON object."""


class TransportError(PocketError):
    """Connection could not be established or the request timed out."""


class RemoteAPIError(PocketError):
    """Pocket answered with a non-200 status."""

    def __init__(
        self,
        status_code: int,
        error_text: str = "",
        error_code: Optional[str] = None,
    ):
        self.status_code = status_code
        self.error_text = error_text
        self.error_code = error_code
        super().__init__(f"API Error: {error_text}")


class ProtocolError(PocketError):
    """A 200 response is missing a required field."""


class InvalidStateError(PocketError):
    """Operation invoked out of sequence."""


class NotAuthorizedError(PocketError):
    """No access token is stored."""


class StorageError(PocketError):
    """Settings store could not be read or written."""


class ConfigError(PocketError):
    """Environment configuration is invalid."""
