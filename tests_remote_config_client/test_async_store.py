"""
Tests for AsyncConfigStore
Logic testing: Decision/Branch, State Transition, Path coverage
"""
import httpx
import pytest
import pytest_asyncio
import respx

from remote_config_client.auth import CallableTokenProvider
from remote_config_client.errors import (
    AuthError,
    PreconditionMissingError,
    TransportError,
    VersionConflictError,
)
from remote_config_client.store import AsyncConfigStore
from remote_config_client.transport import AsyncHttpxTransport
from remote_config_client.types import TransportResponse

from .conftest import ENDPOINT, TOKEN


@pytest.fixture
def async_store(token_provider, mock_async_transport, settings):
    return AsyncConfigStore(
        token_provider=token_provider, transport=mock_async_transport, settings=settings
    )


@pytest_asyncio.fixture
async def server_store(token_provider, settings, fake_server):
    router = respx.MockRouter(assert_all_called=False)
    router.route(url=ENDPOINT).mock(side_effect=fake_server.handle)
    client = httpx.AsyncClient(transport=httpx.MockTransport(router.async_handler))
    store = AsyncConfigStore(
        token_provider=token_provider,
        transport=AsyncHttpxTransport(client),
        settings=settings,
    )
    yield store
    await client.aclose()


class TestAsyncRead:
    # Happy Path
    @pytest.mark.asyncio
    async def test_read(self, async_store, mock_async_transport):
        result = await async_store.read()

        assert result.version == '"v1"'
        assert result.document == {"parameters": {}}
        method, url, headers = mock_async_transport.request.call_args.args
        assert method == "GET"
        assert url == ENDPOINT
        assert headers["Authorization"] == f"Bearer {TOKEN}"

    # Decision: lowercase etag
    @pytest.mark.asyncio
    async def test_read_lowercase_etag(self, async_store, mock_async_transport):
        mock_async_transport.request.return_value = TransportResponse(
            status=200, headers={"etag": '"abc123"'}, content=b'{"parameters":{}}'
        )
        assert await async_store.current_version() == '"abc123"'

    # Path: async token provider
    @pytest.mark.asyncio
    async def test_async_token_provider(self, mock_async_transport, settings):
        async def fetch_token(scopes):
            assert scopes == ("https://www.googleapis.com/auth/firebase.remoteconfig",)
            return "async-token"

        store = AsyncConfigStore(
            token_provider=CallableTokenProvider(fetch_token),
            transport=mock_async_transport,
            settings=settings,
        )
        await store.read()
        headers = mock_async_transport.request.call_args.args[2]
        assert headers["Authorization"] == "Bearer async-token"

    # Error Path: auth failure, no HTTP call
    @pytest.mark.asyncio
    async def test_read_auth_error(self, failing_token_provider, mock_async_transport, settings):
        store = AsyncConfigStore(
            token_provider=failing_token_provider, transport=mock_async_transport, settings=settings
        )
        with pytest.raises(AuthError):
            await store.read()
        with pytest.raises(AuthError):
            await store.update({}, '"v1"')
        mock_async_transport.request.assert_not_called()


class TestAsyncWrites:
    # Boundary: empty version
    @pytest.mark.asyncio
    async def test_update_requires_version(self, async_store, mock_async_transport):
        with pytest.raises(PreconditionMissingError):
            await async_store.update({}, "")
        mock_async_transport.request.assert_not_called()

    # Decision: wildcard
    @pytest.mark.asyncio
    async def test_force_update(self, async_store, mock_async_transport):
        result = await async_store.force_update({"parameters": {}})
        assert result.success is True
        assert mock_async_transport.request.call_args.args[2]["If-Match"] == "*"

    @pytest.mark.asyncio
    async def test_update_rejects_wildcard(self, async_store, mock_async_transport):
        with pytest.raises(PreconditionMissingError):
            await async_store.update({}, "*")
        mock_async_transport.request.assert_not_called()

    # Error Path: foreign transport exception wrapped
    @pytest.mark.asyncio
    async def test_custom_transport_failure(self, async_store, mock_async_transport):
        mock_async_transport.request.side_effect = ConnectionError("connection reset")
        with pytest.raises(TransportError) as exc:
            await async_store.read()
        assert isinstance(exc.value.__cause__, ConnectionError)
        outcome = await async_store.try_force_update({})
        assert isinstance(outcome.error, TransportError)

    # Error Path: non-conflict failure
    @pytest.mark.asyncio
    async def test_update_server_error(self, async_store, mock_async_transport):
        mock_async_transport.request.return_value = TransportResponse(status=502)
        outcome = await async_store.try_update({}, '"v1"')
        assert isinstance(outcome.error, TransportError)
        assert not outcome.is_conflict


class TestAsyncAgainstServer:
    # State Transition: read -> update -> stale update -> force update
    @pytest.mark.asyncio
    async def test_conflict_then_force(self, server_store):
        first = await server_store.read()
        await server_store.update({"parameters": {"a": {}}}, first.version)

        with pytest.raises(VersionConflictError):
            await server_store.update({"parameters": {"b": {}}}, first.version)

        outcome = await server_store.try_update({"parameters": {"b": {}}}, first.version)
        assert outcome.is_conflict

        forced = await server_store.try_force_update({"parameters": {"b": {}}})
        assert forced.ok
        assert await server_store.current_document() == {"parameters": {"b": {}}}

    @pytest.mark.asyncio
    async def test_try_read(self, server_store):
        outcome = await server_store.try_read()
        assert outcome.ok
        assert outcome.value.document == {"parameters": {}}


class TestAsyncLifecycle:
    @pytest.mark.asyncio
    async def test_context_manager_keeps_injected_transport(self, async_store, mock_async_transport):
        async with async_store as store:
            await store.read()
        mock_async_transport.close.assert_not_called()
