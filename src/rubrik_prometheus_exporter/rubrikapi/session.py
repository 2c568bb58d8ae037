"""Authentication against the Rubrik appliance.

Selects one of three strategies to obtain the bearer token used by every
subsequent REST and GraphQL call:

1. OAuth2 client-credentials grant (service account).
2. HTTP Basic against the session endpoint with the service account's
   client id and secret (fallback for 1).
3. HTTP Basic against the session endpoint with username and password.

The resulting :class:`Session` is created once at startup and never renewed.
"""

from dataclasses import dataclass

import httpx
import pydantic
import structlog

from .errors import AuthError
from .types import OAuth2TokenResponse, SessionResponse

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0

TOKEN_ENDPOINT = "/api/client_token"
SESSION_ENDPOINT = "/api/v1/session"


@dataclass(frozen=True)
class Credentials:
    """Appliance credentials.

    Either the username/password pair or the service account pair is
    expected to be populated. Service account credentials take precedence
    when both are present.
    """

    username: str = ""
    password: str = ""
    client_id: str = ""
    client_secret: str = ""

    @property
    def has_service_account(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @property
    def has_user_password(self) -> bool:
        return bool(self.username and self.password)


@dataclass(frozen=True)
class Session:
    """An authenticated appliance session.

    Immutable: the token is written once by :class:`SessionManager` and only
    read afterwards, so it can be shared across concurrent scrapes without
    locking.
    """

    token: str
    logged_in: bool = True

    @property
    def authorization(self) -> str:
        """Value for the ``Authorization`` header."""
        return f"Bearer {self.token}"


class _StrategyError(Exception):
    """A single authentication strategy failed."""


class SessionManager:
    """Obtains and tears down the appliance session."""

    def __init__(
        self,
        base_url: str,
        verify_tls: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the session manager.

        Args:
            base_url: Appliance base URL (e.g., "https://rubrik.local").
            verify_tls: Verify the appliance's TLS certificate.
            timeout: Request timeout in seconds.
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

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            verify=self._verify_tls,
            timeout=self._timeout,
            transport=self._transport,
        )

    def authenticate(self, credentials: Credentials) -> Session:
        """Authenticate with the first applicable strategy.

        Args:
            credentials: Configured appliance credentials.

        Returns:
            A logged-in session.

        Raises:
            AuthError: If the selected strategy (or, for service accounts,
                both of its sub-strategies) failed, or no credentials are
                configured.
        """
        if credentials.has_service_account:
            logger.info("Using service account authentication")
            return self._login_with_service_account(credentials)

        if credentials.has_user_password:
            logger.info("Using username/password authentication")
            try:
                token = self._basic_session_login(
                    credentials.username,
                    credentials.password,
                )
            except _StrategyError as e:
                msg = f"Username/password authentication failed: {e}"
                raise AuthError(msg) from e
            return Session(token=token)

        msg = "No credentials configured: need username/password or service account"
        raise AuthError(msg)

    def _login_with_service_account(self, credentials: Credentials) -> Session:
        try:
            token = self._oauth2_client_credentials(
                credentials.client_id,
                credentials.client_secret,
            )
        except _StrategyError as e:
            logger.warning(
                "OAuth2 client credentials failed, trying basic auth with "
                "service account credentials",
                error=str(e),
            )
        else:
            logger.info("Authenticated with service account", endpoint=TOKEN_ENDPOINT)
            return Session(token=token)

        try:
            token = self._basic_session_login(
                credentials.client_id,
                credentials.client_secret,
            )
        except _StrategyError as e:
            msg = f"Service account authentication failed: {e}"
            raise AuthError(msg) from e

        logger.info("Authenticated with service account basic auth")
        return Session(token=token)

    def _post(self, path: str, **kwargs) -> httpx.Response:
        try:
            with self._client() as client:
                response = client.post(path, **kwargs)
        except httpx.HTTPError as e:
            msg = f"request to {path} failed: {e}"
            raise _StrategyError(msg) from e

        if not response.is_success:
            msg = f"HTTP {response.status_code} from {path}"
            raise _StrategyError(msg)
        return response

    def _oauth2_client_credentials(self, client_id: str, client_secret: str) -> str:
        response = self._post(
            TOKEN_ENDPOINT,
            data={
                "grant_type": "client_credentials",
                "client_id": client_id,
                "client_secret": client_secret,
            },
        )
        try:
            token = OAuth2TokenResponse.model_validate_json(response.content)
        except pydantic.ValidationError as e:
            msg = f"failed to decode token response: {e.error_count()} error(s)"
            raise _StrategyError(msg) from e

        if not token.access_token:
            msg = "token response carried no access_token"
            raise _StrategyError(msg)
        return token.access_token

    def _basic_session_login(self, username: str, password: str) -> str:
        response = self._post(SESSION_ENDPOINT, auth=(username, password))
        try:
            session = SessionResponse.model_validate_json(response.content)
        except pydantic.ValidationError as e:
            msg = f"failed to decode session response: {e.error_count()} error(s)"
            raise _StrategyError(msg) from e

        if not session.token:
            msg = "session response carried no token"
            raise _StrategyError(msg)
        return session.token

    def logout(self, session: Session) -> None:
        """Invalidate the session token on the appliance.

        Best effort: failures are logged and never raised.
        """
        try:
            with self._client() as client:
                response = client.delete(
                    SESSION_ENDPOINT,
                    headers={"Authorization": session.authorization},
                )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Logout failed", error=str(e))
            return
        logger.info("Logged out of Rubrik session")
