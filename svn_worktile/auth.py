"""
Worktile access token lifecycle and authorized requests.

The open API uses the OAuth client-credentials grant. Tokens are long lived;
a cached token is reused until less than ``REFRESH_THRESHOLD`` of its
lifetime remains. All calls other than the token request go through
``AuthorizedTransport``, which retries exactly once when Worktile reports the
token as invalid or expired.
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from svn_worktile.exceptions import ApiError, AuthError
from svn_worktile.locks import ReadWriteLock
from svn_worktile.logging import get_logger
from svn_worktile.transport import AsyncHTTPTransport
from svn_worktile.types.auth import AccessToken

logger = get_logger("auth")

TOKEN_PATH = "/v1/auth/token"

REFRESH_THRESHOLD = timedelta(hours=12)

# 100026: access_token invalid
# 100028: access_token expired
# 100032: authorization_code rejected
AUTH_ERROR_CODES = frozenset({"100026", "100028", "100032"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenManager:
    """
    Owns the cached access token.

    ``acquire()`` returns the cached token while it is fresh. A stale or
    missing token is refreshed under the exclusive lock, so concurrent
    callers share a single token request.
    """

    def __init__(
        self,
        transport: AsyncHTTPTransport,
        client_id: str,
        client_secret: str,
        refresh_threshold: timedelta = REFRESH_THRESHOLD,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Initialize the token manager.

        Args:
            transport: Transport used for the token request
            client_id: Worktile application client id
            client_secret: Worktile application client secret
            refresh_threshold: Remaining lifetime at which a token is refreshed
            clock: Returns the current timezone-aware time
        """
        self._transport = transport
        self._client_id = client_id
        self._client_secret = client_secret
        self.refresh_threshold = refresh_threshold
        self._clock = clock
        self._lock = ReadWriteLock()
        self._token: AccessToken | None = None

    @property
    def token(self) -> AccessToken | None:
        """The cached token, if any."""
        return self._token

    def _is_fresh(self, token: AccessToken | None) -> bool:
        return token is not None and token.remaining(self._clock()) > self.refresh_threshold

    async def acquire(self) -> str:
        """
        Get a bearer token value, refreshing it when stale.

        Returns:
            Access token value

        Raises:
            AuthError: If the token request fails
        """
        async with self._lock.reader():
            token = self._token
            if self._is_fresh(token):
                return token.value

        async with self._lock.writer():
            # Another task may have refreshed while we waited.
            token = self._token
            if self._is_fresh(token):
                return token.value

            self._token = None
            self._token = await self._request_token()
            return self._token.value

    async def invalidate(self, observed: str) -> bool:
        """
        Drop the cached token if it is still the one a caller saw rejected.

        Args:
            observed: Token value the rejected request carried

        Returns:
            True if the cached token was cleared
        """
        async with self._lock.writer():
            if self._token is not None and self._token.value == observed:
                self._token = None
                logger.info("access token rejected, cleared for refresh")
                return True
        return False

    async def _request_token(self) -> AccessToken:
        params = {
            "grant_type": "client_credentials",
            "client_id": self._client_id,
            "client_secret": self._client_secret,
        }
        try:
            data = await self._transport.request("POST", TOKEN_PATH, params=params)
        except ApiError as e:
            raise AuthError(e.code, e.detail, "POST", TOKEN_PATH) from e

        code = data.get("code")
        if isinstance(code, str):
            raise AuthError(code, data.get("message") or "token request rejected", "POST", TOKEN_PATH)

        try:
            value = data["access_token"]
            expires_at = datetime.fromtimestamp(int(data["expires_in"]), tz=timezone.utc)
        except (KeyError, TypeError, ValueError) as e:
            raise AuthError("INVALID_RESPONSE", f"malformed token response: {e}", "POST", TOKEN_PATH) from e

        logger.info(f"access token refreshed, expires at {expires_at.isoformat()}")
        return AccessToken(value=str(value), expires_at=expires_at)


class AuthorizedTransport:
    """
    Sends bearer-authenticated requests through a TokenManager.

    A response carrying one of ``AUTH_ERROR_CODES`` clears the token the
    request used and is retried once with a fresh token. Any other tracker
    error code fails the call immediately.
    """

    def __init__(self, transport: AsyncHTTPTransport, tokens: TokenManager) -> None:
        self.transport = transport
        self.tokens = tokens

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Make an authenticated request.

        Args:
            method: HTTP method (GET, POST)
            path: API path
            params: Query parameters
            body: JSON request body

        Returns:
            Decoded JSON response without a tracker error code

        Raises:
            AuthError: If the token request fails or the token is rejected twice
            ApiError: On any other tracker error or transport failure
        """
        retried = False
        while True:
            token = await self.tokens.acquire()
            try:
                data = await self.transport.request(method, path, params=params, body=body, token=token)
                code = data.get("code")
                if isinstance(code, str):
                    raise ApiError(code, str(data.get("message") or "Worktile API error"), method, path)
                return data
            except ApiError as e:
                if e.code not in AUTH_ERROR_CODES:
                    raise
                if retried:
                    raise AuthError(e.code, "access token rejected after refresh", method, path) from e
                retried = True
                await self.tokens.invalidate(token)
