#!/usr/bin/env python3
"""
Pocket v3 API transport.
Every Pocket call is a JSON POST; failures are signalled with a non-200
status and an X-Error header rather than in the body.
"""

import json
import logging
from typing import Any, Dict, Optional

import requests
from requests import Session

from errors import DecodingError, EncodingError, RemoteAPIError, TransportError

logger = logging.getLogger(__name__)

HOST = "https://getpocket.com/v3"

ENDPOINT_ADD = "/add"
ENDPOINT_REQUEST_TOKEN = "/oauth/request"
ENDPOINT_AUTHORIZE = "/oauth/authorize"

# Error message for non-200 responses lives in these headers
X_ERROR_HEADER = "X-Error"
X_ERROR_CODE_HEADER = "X-Error-Code"

DEFAULT_TIMEOUT = 5.0  # seconds

REQUEST_HEADERS = {
    "Content-Type": "application/json; charset=UTF8",
    "X-Accept": "application/json",
}


class PocketAPIClient:
    """Issues single POST calls against the Pocket API."""

    def __init__(
        self,
        session: Optional[Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        host: str = HOST,
    ):
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.host = host

    def call(self, endpoint: str, body: Any) -> Dict[str, Any]:
        """
        POST body as JSON to host + endpoint and decode the response.

        Args:
            endpoint: One of the ENDPOINT_* paths
            body: JSON-serializable request body

        Returns:
            Decoded response fields

        Raises:
            EncodingError: body cannot be serialized
            TransportError: connection failure or timeout
            RemoteAPIError: status other than 200
            DecodingError: response body is not a JSON object
        """
        try:
            payload = json.dumps(body, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise EncodingError(f"failed to marshal input body: {e}") from e

        url = self.host + endpoint
        logger.debug(f"POST {url}")

        try:
            response = self.session.post(
                url,
                data=payload.encode("utf-8"),
                headers=REQUEST_HEADERS,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise TransportError(f"request to {endpoint} timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"failed to send http request to {endpoint}: {e}") from e

        if response.status_code != 200:
            error_text = response.headers.get(X_ERROR_HEADER, "")
            error_code = response.headers.get(X_ERROR_CODE_HEADER)
            logger.error(
                f"Pocket API request to {endpoint} failed with status "
                f"{response.status_code}: {error_text}"
            )
            raise RemoteAPIError(response.status_code, error_text, error_code)

        try:
            fields = json.loads(response.content)
        except ValueError as e:
            raise DecodingError(f"failed to parse response body from {endpoint}: {e}") from e

        if not isinstance(fields, dict):
            raise DecodingError(f"response body from {endpoint} is not a JSON object")

        return fields

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
