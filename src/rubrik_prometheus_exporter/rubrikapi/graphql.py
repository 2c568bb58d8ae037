"""GraphQL client for the Rubrik appliance."""

import threading
import time
from typing import Any, TypeVar

import httpx
import pydantic
import structlog

from .errors import QueryError
from .session import DEFAULT_TIMEOUT, Session

logger = structlog.get_logger(__name__)

GRAPHQL_PATH = "/api/graphql"

M = TypeVar("M", bound=pydantic.BaseModel)


class GraphQueryClient:
    """Executes named GraphQL queries against the appliance.

    Every failure (transport, non-2xx, non-JSON body, GraphQL ``errors``,
    or a ``data`` member that does not match the expected response type)
    is raised as :class:`QueryError`. An empty ``data`` member is not a
    failure: it is logged and validated as an empty object.
    """

    def __init__(
        self,
        base_url: str,
        session: Session,
        verify_tls: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        if not base_url:
            msg = "base_url cannot be empty"
            raise ValueError(msg)
        if timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)

        self.endpoint = base_url.rstrip("/") + GRAPHQL_PATH
        self._verify_tls = verify_tls
        self._timeout = timeout
        self._transport = transport
        self._headers = {
            "Accept": "application/json",
            "Authorization": session.authorization,
        }
        self._local = threading.local()

    @property
    def client(self) -> httpx.Client:
        """Get or create the thread-local httpx client."""
        if not hasattr(self._local, "client") or self._local.client.is_closed:
            self._local.client = httpx.Client(
                headers=self._headers,
                timeout=self._timeout,
                verify=self._verify_tls,
                transport=self._transport,
            )
        return self._local.client

    def close(self):
        """Close the thread-local HTTP client if open."""
        if hasattr(self._local, "client") and not self._local.client.is_closed:
            self._local.client.close()

    def query(
        self,
        document: str,
        response_type: type[M],
        variables: dict[str, Any] | None = None,
    ) -> M:
        """Execute a query and validate its ``data`` member.

        Args:
            document: GraphQL query document.
            response_type: Model describing the query's ``data`` shape.
            variables: Optional query variables.

        Returns:
            The validated response.

        Raises:
            QueryError: If the query failed for any reason.
        """
        payload: dict[str, Any] = {"query": document}
        if variables:
            payload["variables"] = variables

        start_time = time.time()
        logger.debug(
            "Executing GraphQL query",
            query=response_type.__name__,
            variables=variables,
        )
        try:
            response = self.client.post(self.endpoint, json=payload)
        except httpx.HTTPError as e:
            msg = f"GraphQL request failed: {e}"
            raise QueryError(msg) from e

        if not response.is_success:
            msg = f"GraphQL endpoint returned HTTP {response.status_code}"
            raise QueryError(msg, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            msg = f"GraphQL response is not JSON: {e}"
            raise QueryError(msg, status_code=response.status_code) from e
        if not isinstance(body, dict):
            msg = "GraphQL response is not a JSON object"
            raise QueryError(msg, status_code=response.status_code)

        if errors := body.get("errors"):
            messages = [
                err.get("message", str(err)) if isinstance(err, dict) else str(err)
                for err in errors
            ]
            msg = f"GraphQL returned errors: {'; '.join(messages)}"
            raise QueryError(msg, status_code=response.status_code)

        data = body.get("data")
        if not data:
            logger.warning(
                "GraphQL query succeeded but result is empty",
                query=response_type.__name__,
            )
            data = {}

        try:
            result = response_type.model_validate(data)
        except pydantic.ValidationError as e:
            msg = (
                f"GraphQL response does not match {response_type.__name__}: "
                f"{e.error_count()} error(s)"
            )
            raise QueryError(msg, status_code=response.status_code) from e

        logger.debug(
            "GraphQL query succeeded",
            query=response_type.__name__,
            size_bytes=len(response.content),
            duration_seconds=round(time.time() - start_time, 3),
        )
        return result
