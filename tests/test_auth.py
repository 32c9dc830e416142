"""
Tests for access token management and authorized requests.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from svn_worktile.auth import TOKEN_PATH, AuthorizedTransport, TokenManager
from svn_worktile.exceptions import ApiError, AuthError
from svn_worktile.testing import MockWorktile
from svn_worktile.transport import AsyncHTTPTransport
from svn_worktile.types import AccessToken

PRODUCTS_PATH = "/v1/scm/products"
START = datetime(2024, 3, 1, 8, 0, 0, tzinfo=timezone.utc)


class Clock:
    """Manually advanced clock shared by the server and the token manager."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


def _token_manager(server: MockWorktile, clock: Clock | None = None) -> TokenManager:
    transport = AsyncHTTPTransport("https://worktile.test", http_transport=server.transport())
    if clock is None:
        return TokenManager(transport, "client-id", "client-secret")
    return TokenManager(transport, "client-id", "client-secret", clock=clock)


def _authorized(server: MockWorktile) -> AuthorizedTransport:
    tokens = _token_manager(server)
    return AuthorizedTransport(tokens._transport, tokens)


@given(hours=st.integers(min_value=0, max_value=24 * 30))
@settings(max_examples=100)
def test_property_access_token_remaining(hours: int) -> None:
    token = AccessToken(value="secret-value", expires_at=START + timedelta(hours=hours))

    assert token.remaining(START) == timedelta(hours=hours)
    assert "secret-value" not in repr(token)


class TestTokenManager:
    @pytest.mark.asyncio
    async def test_token_request(self) -> None:
        server = MockWorktile()
        tokens = _token_manager(server)

        value = await tokens.acquire()

        assert value == server.tokens_issued[0]
        call = server.get_calls("POST", TOKEN_PATH)[0]
        assert call.params == {
            "grant_type": "client_credentials",
            "client_id": "client-id",
            "client_secret": "client-secret",
        }
        assert call.token is None

    @pytest.mark.asyncio
    async def test_fresh_token_is_reused(self) -> None:
        clock = Clock()
        server = MockWorktile(token_lifetime=timedelta(days=7), clock=clock)
        tokens = _token_manager(server, clock)

        first = await tokens.acquire()
        clock.advance(timedelta(days=6))
        second = await tokens.acquire()

        assert first == second
        assert server.call_count("POST", TOKEN_PATH) == 1

    @pytest.mark.asyncio
    async def test_stale_token_is_refreshed(self) -> None:
        clock = Clock()
        server = MockWorktile(token_lifetime=timedelta(hours=13), clock=clock)
        tokens = _token_manager(server, clock)

        first = await tokens.acquire()
        clock.advance(timedelta(hours=2))
        second = await tokens.acquire()

        assert first != second
        assert server.call_count("POST", TOKEN_PATH) == 2
        assert tokens.token is not None
        assert tokens.token.value == second

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_refresh(self) -> None:
        server = MockWorktile(latency=0.01)
        tokens = _token_manager(server)

        values = await asyncio.gather(*(tokens.acquire() for _ in range(10)))

        assert len(set(values)) == 1
        assert server.call_count("POST", TOKEN_PATH) == 1

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_stale_refresh(self) -> None:
        clock = Clock()
        server = MockWorktile(token_lifetime=timedelta(hours=13), latency=0.01, clock=clock)
        tokens = _token_manager(server, clock)
        stale = await tokens.acquire()
        clock.advance(timedelta(hours=1))

        values = await asyncio.gather(*(tokens.acquire() for _ in range(10)))

        assert len(set(values)) == 1
        assert values[0] != stale
        assert server.call_count("POST", TOKEN_PATH) == 2

    @pytest.mark.asyncio
    async def test_invalidate_is_conditional(self) -> None:
        server = MockWorktile()
        tokens = _token_manager(server)
        value = await tokens.acquire()

        assert await tokens.invalidate("some-older-token") is False
        assert tokens.token is not None

        assert await tokens.invalidate(value) is True
        assert tokens.token is None

    @pytest.mark.asyncio
    async def test_rejected_credentials(self) -> None:
        server = MockWorktile()
        server.queue_response("POST", TOKEN_PATH, {"code": "100001", "message": "invalid client"})
        tokens = _token_manager(server)

        with pytest.raises(AuthError) as exc_info:
            await tokens.acquire()

        assert exc_info.value.code == "100001"
        assert tokens.token is None

    @pytest.mark.asyncio
    async def test_http_error_on_token_request(self) -> None:
        server = MockWorktile()
        server.queue_response("POST", TOKEN_PATH, {"message": "maintenance"}, status_code=503)
        tokens = _token_manager(server)

        with pytest.raises(AuthError) as exc_info:
            await tokens.acquire()

        assert exc_info.value.code == "503"
        assert exc_info.value.detail == "maintenance"

    @pytest.mark.asyncio
    async def test_malformed_token_response(self) -> None:
        server = MockWorktile()
        server.queue_response("POST", TOKEN_PATH, {"access_token": "abc"})
        tokens = _token_manager(server)

        with pytest.raises(AuthError) as exc_info:
            await tokens.acquire()

        assert exc_info.value.code == "INVALID_RESPONSE"

    @pytest.mark.asyncio
    async def test_failed_refresh_can_be_retried(self) -> None:
        server = MockWorktile()
        server.queue_response("POST", TOKEN_PATH, {"code": "100001", "message": "try later"})
        tokens = _token_manager(server)

        with pytest.raises(AuthError):
            await tokens.acquire()

        assert await tokens.acquire() == server.tokens_issued[0]


class TestAuthorizedTransport:
    @pytest.mark.asyncio
    async def test_bearer_token_attached(self) -> None:
        server = MockWorktile()
        authorized = _authorized(server)

        await authorized.request("GET", PRODUCTS_PATH, params={"name": "SVN"})

        call = server.get_calls("GET", PRODUCTS_PATH)[0]
        assert call.token == server.tokens_issued[0]

    @pytest.mark.asyncio
    async def test_expired_token_retried_once(self) -> None:
        server = MockWorktile()
        authorized = _authorized(server)
        await authorized.tokens.acquire()
        server.revoke_tokens()

        data = await authorized.request("GET", PRODUCTS_PATH, params={"name": "SVN"})

        assert data == {"values": []}
        assert server.call_count("GET", PRODUCTS_PATH) == 2
        assert server.call_count("POST", TOKEN_PATH) == 2
        calls = server.get_calls("GET", PRODUCTS_PATH)
        assert calls[0].token != calls[1].token

    @pytest.mark.asyncio
    async def test_code_in_successful_body_retried_once(self) -> None:
        server = MockWorktile()
        server.queue_response("GET", PRODUCTS_PATH, {"code": "100026", "message": "access_token invalid"})
        authorized = _authorized(server)

        data = await authorized.request("GET", PRODUCTS_PATH, params={"name": "SVN"})

        assert data == {"values": []}
        assert server.call_count("GET", PRODUCTS_PATH) == 2

    @pytest.mark.asyncio
    async def test_rejected_twice_raises_auth_error(self) -> None:
        server = MockWorktile()
        server.queue_response("GET", PRODUCTS_PATH, {"code": "100028", "message": "access_token expired"})
        server.queue_response("GET", PRODUCTS_PATH, {"code": "100028", "message": "access_token expired"})
        authorized = _authorized(server)

        with pytest.raises(AuthError) as exc_info:
            await authorized.request("GET", PRODUCTS_PATH, params={"name": "SVN"})

        assert exc_info.value.code == "100028"
        assert server.call_count("GET", PRODUCTS_PATH) == 2

    @pytest.mark.asyncio
    async def test_other_tracker_code_not_retried(self) -> None:
        server = MockWorktile()
        server.queue_response("POST", PRODUCTS_PATH, {"code": "100500", "message": "name too long"})
        authorized = _authorized(server)

        with pytest.raises(ApiError) as exc_info:
            await authorized.request("POST", PRODUCTS_PATH, body={"name": "x" * 300})

        assert not isinstance(exc_info.value, AuthError)
        assert exc_info.value.code == "100500"
        assert exc_info.value.detail == "name too long"
        assert server.call_count("POST", PRODUCTS_PATH) == 1

    @pytest.mark.asyncio
    async def test_concurrent_rejections_refresh_once(self) -> None:
        server = MockWorktile(latency=0.01)
        authorized = _authorized(server)
        await authorized.tokens.acquire()
        server.revoke_tokens()

        results = await asyncio.gather(
            *(authorized.request("GET", PRODUCTS_PATH, params={"name": "SVN"}) for _ in range(5))
        )

        assert all(data == {"values": []} for data in results)
        assert len(server.tokens_issued) == 2
