"""
Async HTTP Transport for svn-worktile.

Handles JSON communication with the Worktile open API using the httpx async
client: bearer header injection, request/response logging with credentials
masked, and error mapping into typed exceptions.
"""

import asyncio
import random
import time
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from typing import Any

import httpx

from svn_worktile.exceptions import ApiError
from svn_worktile.logging import log_http_request, log_http_response


@dataclass
class RetryConfig:
    """
    Configuration for transport-level retries.

    Only GET requests are retried: Worktile queries are read-only, while a
    repeated POST could create a second entity. Retries are off by default.
    """

    max_retries: int = 0
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 500, 502, 503])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


class AsyncHTTPTransport:
    """
    Async HTTP transport for the Worktile open API.

    Handles:
    - ``authorization: Bearer`` header on authenticated calls
    - Optional exponential backoff with jitter for GET requests
    - Mapping of HTTP and transport failures to ApiError

    The transport does not interpret tracker error codes in successful
    responses; that is the job of the authorized layer in ``svn_worktile.auth``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        verify_ssl: bool = True,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "https://open.worktile.com")
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
            verify_ssl: Verify the server certificate
            http_transport: Custom httpx transport (e.g., httpx.MockTransport in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            verify=verify_ssl,
            trust_env=False,
            transport=http_transport,
            headers={"Content-Type": "application/json"},
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
        token: str | None = None,
    ) -> dict[str, Any]:
        """
        Make a request and decode its JSON body.

        Args:
            method: HTTP method (GET, POST)
            path: API path (e.g., "/v1/scm/products")
            params: Query parameters
            body: JSON request body
            token: Bearer token to attach (optional)

        Returns:
            Decoded JSON object. A tracker ``code`` field is passed through
            untouched on 2xx responses.

        Raises:
            ApiError: On HTTP errors, connection failures, timeouts or
                undecodable bodies
        """
        headers = {"authorization": f"Bearer {token}"} if token is not None else None

        async def make_request() -> httpx.Response:
            log_http_request(method, path, params, body)
            return await self._client.request(method, path, params=params, json=body, headers=headers)

        return await self._execute_with_retry(method, path, make_request)

    async def _execute_with_retry(
        self,
        method: str,
        path: str,
        request_fn: Callable[[], Coroutine[Any, Any, httpx.Response]],
    ) -> dict[str, Any]:
        """
        Execute a request, retrying GET requests on retryable failures.

        Args:
            method: HTTP method, decides whether retries are allowed
            path: API path, for error context
            request_fn: Async function that makes the HTTP request

        Returns:
            Parsed JSON response

        Raises:
            ApiError: On non-retryable errors or after max retries
        """
        attempt = 0
        while True:
            started = time.monotonic()
            try:
                response = await request_fn()
            except httpx.TimeoutException as e:
                if not self._should_retry(method, None, attempt):
                    raise ApiError("TIMEOUT", f"timed out after {self.timeout} seconds", method, path) from e
                await asyncio.sleep(self._get_backoff_time(attempt, None))
                attempt += 1
                continue
            except httpx.RequestError as e:
                if not self._should_retry(method, None, attempt):
                    raise ApiError("CONNECTION_ERROR", str(e) or type(e).__name__, method, path) from e
                await asyncio.sleep(self._get_backoff_time(attempt, None))
                attempt += 1
                continue

            elapsed_ms = (time.monotonic() - started) * 1000
            data = self._decode_body(response)
            log_http_response(response.status_code, path, data, elapsed_ms)

            if response.status_code < 400:
                if data is None:
                    raise ApiError("INVALID_RESPONSE", "response body is not a JSON object", method, path)
                return data

            if self._should_retry(method, response.status_code, attempt):
                retry_after = response.headers.get("Retry-After")
                await asyncio.sleep(self._get_backoff_time(attempt, retry_after))
                attempt += 1
                continue

            raise self._parse_error_response(response, data, method, path)

    def _should_retry(self, method: str, status_code: int | None, attempt: int) -> bool:
        """
        Determine if a request should be retried.

        Args:
            method: HTTP method
            status_code: HTTP status code, None for connection errors
            attempt: Current attempt number (0-indexed)

        Returns:
            True if the request should be retried
        """
        if method.upper() != "GET":
            return False

        if attempt >= self.retry_config.max_retries:
            return False

        return status_code is None or status_code in self.retry_config.retry_on

    def _get_backoff_time(self, attempt: int, retry_after: str | None) -> float:
        """
        Calculate backoff time for retry.

        Uses exponential backoff with jitter, respecting Retry-After header
        if present.

        Args:
            attempt: Current attempt number (0-indexed)
            retry_after: Value of Retry-After header (if present)

        Returns:
            Time to wait in seconds
        """
        if retry_after and self.retry_config.respect_retry_after:
            try:
                return min(float(retry_after), self.retry_config.max_backoff)
            except ValueError:
                pass  # Fall through to exponential backoff

        base_wait = self.retry_config.backoff_factor ** attempt

        jitter_range = base_wait * self.retry_config.jitter
        jitter = random.uniform(-jitter_range, jitter_range)
        wait_time = base_wait + jitter

        return min(wait_time, self.retry_config.max_backoff)

    @staticmethod
    def _decode_body(response: httpx.Response) -> dict[str, Any] | None:
        """Decode a JSON object body, None when the body is not one."""
        try:
            data = response.json()
        except ValueError:
            return None
        return data if isinstance(data, dict) else None

    @staticmethod
    def _parse_error_response(
        response: httpx.Response,
        data: dict[str, Any] | None,
        method: str,
        path: str,
    ) -> ApiError:
        """
        Build the ApiError for an HTTP error response.

        The tracker ``code`` and ``message`` fields are used when present,
        otherwise the HTTP status.
        """
        data = data or {}
        code = data.get("code")
        message = data.get("message") or f"HTTP {response.status_code}"
        return ApiError(str(code) if code is not None else str(response.status_code), str(message), method, path)
