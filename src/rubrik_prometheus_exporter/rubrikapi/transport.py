"""REST transport for the Rubrik appliance.

Issues individual bearer-authenticated HTTP calls against the appliance's
REST API and classifies non-2xx responses as failures. Decoding into domain
types is left to the caller.
"""

import threading
import time
from typing import Any

import httpx
import structlog

from .errors import DecodeError, RequestError
from .session import DEFAULT_TIMEOUT, Session

logger = structlog.get_logger(__name__)


class RestTransport:
    """HTTP transport for the Rubrik REST API.

    Thread-safe through thread-local storage of httpx.Client instances.
    TLS verification is off by default since appliances commonly present a
    self-signed certificate. Can be used as a context manager for automatic
    cleanup.
    """

    def __init__(
        self,
        base_url: str,
        session: Session,
        verify_tls: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the REST transport.

        Args:
            base_url: Appliance base URL (e.g., "https://rubrik.local").
            session: Authenticated session providing the bearer token.
            verify_tls: Verify the appliance's TLS certificate.
            timeout: Per-request timeout in seconds (default: 30.0).
            transport: Optional httpx transport, mainly for tests.

        Raises:
            ValueError: If base_url is empty or timeout is not positive.
        """
        if not base_url:
            msg = "base_url cannot be empty"
            raise ValueError(msg)
        if timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)

        self.base_url = base_url.rstrip("/")
        self._verify_tls = verify_tls
        self._timeout = timeout
        self._transport = transport

        self._headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": session.authorization,
        }

        self._local = threading.local()

    @property
    def client(self) -> httpx.Client:
        """Get or create the thread-local httpx client."""
        if not hasattr(self._local, "client") or self._local.client.is_closed:
            self._local.client = httpx.Client(
                base_url=self.base_url,
                headers=self._headers,
                timeout=self._timeout,
                verify=self._verify_tls,
                transport=self._transport,
            )
        return self._local.client

    def __enter__(self):
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager and cleanup resources."""
        self.close()

    def close(self):
        """Close the thread-local HTTP client if open."""
        if hasattr(self._local, "client") and not self._local.client.is_closed:
            self._local.client.close()

    def execute(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> httpx.Response:
        """Issue a single REST call.

        The body of a non-2xx response is logged but never returned, so an
        HTML or plain-text error page cannot reach a JSON decoder.

        Args:
            method: HTTP method.
            path: API path (e.g., "/api/internal/node").
            params: Optional query parameters.
            body: Optional JSON body.

        Returns:
            The successful response.

        Raises:
            RequestError: On connection failure, timeout, or non-2xx status.
        """
        start_time = time.time()
        params = params or {}

        logger.debug("Making API request", method=method, path=path, params=params)
        try:
            response = self.client.request(method, path, params=params, json=body)
        except httpx.HTTPError as e:
            logger.warning(
                "API request failed",
                method=method,
                path=path,
                error=str(e),
                duration_seconds=round(time.time() - start_time, 3),
            )
            raise RequestError(path, reason=str(e)) from e

        duration = round(time.time() - start_time, 3)
        if not response.is_success:
            logger.warning(
                "API error response",
                method=method,
                path=path,
                status_code=response.status_code,
                body=response.text[:500],
                duration_seconds=duration,
            )
            raise RequestError(path, status_code=response.status_code)

        logger.debug("API request completed", path=path, duration_seconds=duration)
        return response

    def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET a path and decode its JSON body.

        Raises:
            RequestError: If the request fails.
            DecodeError: If the body is not valid JSON.
        """
        response = self.execute("GET", path, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(path, str(e)) from e
