from __future__ import annotations

import dataclasses

import httpcore
import httpx
import pytest

from feedgate.core.client import (
    AsyncSafeHTTPTransport,
    ClientOptions,
    SafeHTTPTransport,
    build_async_client,
    build_client,
    has_safe_dialer,
)
from feedgate.core.exceptions import ConfigError, PrivateNetworkBlockedError
from feedgate.security.dial import AsyncSafeNetworkBackend, SafeNetworkBackend

_OK = [b"HTTP/1.1 200 OK\r\n", b"Content-Type: text/plain\r\n", b"Content-Length: 2\r\n", b"\r\n", b"ok"]


class RecordingBackend(httpcore.MockBackend):
    def __init__(self) -> None:
        super().__init__(list(_OK))
        self.dialed: list[tuple[str, int]] = []

    def connect_tcp(self, host, port, timeout=None, local_address=None, socket_options=None):  # noqa: ANN001
        self.dialed.append((host, port))
        return super().connect_tcp(host, port, timeout=timeout, local_address=local_address, socket_options=socket_options)


class AsyncRecordingBackend(httpcore.AsyncMockBackend):
    def __init__(self) -> None:
        super().__init__(list(_OK))
        self.dialed: list[tuple[str, int]] = []

    async def connect_tcp(self, host, port, timeout=None, local_address=None, socket_options=None):  # noqa: ANN001
        self.dialed.append((host, port))
        return await super().connect_tcp(host, port, timeout=timeout, local_address=local_address, socket_options=socket_options)


def test_unguarded_client_has_default_transport() -> None:
    with build_client(ClientOptions(timeout_s=5.0)) as client:
        assert not has_safe_dialer(client)
        assert not isinstance(client._transport, SafeHTTPTransport)
        assert client.timeout == httpx.Timeout(5.0)


def test_guarded_client_installs_safe_dialer() -> None:
    with build_client(ClientOptions(timeout_s=5.0, block_private_networks=True)) as client:
        assert has_safe_dialer(client)
        transport = client._transport
        assert isinstance(transport, SafeHTTPTransport)
        assert isinstance(transport.network_backend, SafeNetworkBackend)
        assert transport._pool._network_backend is transport.network_backend
        assert client.timeout == httpx.Timeout(5.0)


def test_build_client_is_idempotent() -> None:
    opts = ClientOptions(timeout_s=12.0, block_private_networks=True)
    with build_client(opts) as a, build_client(opts) as b:
        assert a is not b
        assert a.timeout == b.timeout
        assert has_safe_dialer(a) and has_safe_dialer(b)
        assert a._transport is not b._transport
        assert a._transport.network_backend is not b._transport.network_backend


def test_client_options_are_frozen_and_validated() -> None:
    opts = ClientOptions(timeout_s=3.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        opts.timeout_s = 1.0  # type: ignore[misc]
    assert opts.block_private_networks is False

    with pytest.raises(ConfigError):
        ClientOptions(timeout_s=0)
    with pytest.raises(ConfigError):
        ClientOptions(timeout_s=-1.0)


def test_request_lands_on_public_address_only() -> None:
    inner = RecordingBackend()
    transport = SafeHTTPTransport(resolver=lambda host, port: ["10.0.0.5", "93.184.216.34"], inner_backend=inner)

    with httpx.Client(transport=transport, timeout=5.0) as client:
        resp = client.get("http://mixed.example/feed.xml")

    assert resp.status_code == 200
    assert resp.text == "ok"
    assert inner.dialed == [("93.184.216.34", 80)]


def test_blocked_error_propagates_unchanged_through_send() -> None:
    inner = RecordingBackend()
    transport = SafeHTTPTransport(resolver=lambda host, port: ["10.0.0.5", "172.16.3.4"], inner_backend=inner)

    with httpx.Client(transport=transport, timeout=5.0) as client:
        request = client.build_request("POST", "https://internal.example/hook", json={"x": 1})
        with pytest.raises(PrivateNetworkBlockedError) as e:
            client.send(request)

    assert type(e.value) is PrivateNetworkBlockedError
    assert e.value.host == "internal.example"
    assert isinstance(e.value, httpx.TransportError)
    assert inner.dialed == []


def test_underlying_connect_errors_pass_through() -> None:
    class RefusingBackend(httpcore.MockBackend):
        def connect_tcp(self, host, port, timeout=None, local_address=None, socket_options=None):  # noqa: ANN001
            raise httpcore.ConnectError("connection refused")

    transport = SafeHTTPTransport(resolver=lambda host, port: ["93.184.216.34"], inner_backend=RefusingBackend([]))

    with httpx.Client(transport=transport, timeout=5.0) as client:
        with pytest.raises(httpx.ConnectError):
            client.get("http://refused.example/")


@pytest.mark.anyio
async def test_async_guarded_client_installs_safe_dialer() -> None:
    async with build_async_client(ClientOptions(timeout_s=4.0, block_private_networks=True)) as client:
        assert has_safe_dialer(client)
        assert isinstance(client._transport, AsyncSafeHTTPTransport)
        assert isinstance(client._transport.network_backend, AsyncSafeNetworkBackend)

    async with build_async_client(ClientOptions(timeout_s=4.0)) as client:
        assert not has_safe_dialer(client)


@pytest.mark.anyio
async def test_async_request_lands_on_public_address_only() -> None:
    inner = AsyncRecordingBackend()

    async def _resolve(host: str, port: int) -> list[str]:
        return ["10.0.0.5", "93.184.216.34"]

    transport = AsyncSafeHTTPTransport(resolver=_resolve, inner_backend=inner)
    async with httpx.AsyncClient(transport=transport, timeout=5.0) as client:
        resp = await client.get("http://mixed.example/")

    assert resp.status_code == 200
    assert inner.dialed == [("93.184.216.34", 80)]


@pytest.mark.anyio
async def test_async_blocked_error_propagates_unchanged() -> None:
    async def _resolve(host: str, port: int) -> list[str]:
        return ["127.0.0.1"]

    transport = AsyncSafeHTTPTransport(resolver=_resolve, inner_backend=AsyncRecordingBackend())
    async with httpx.AsyncClient(transport=transport, timeout=5.0) as client:
        with pytest.raises(PrivateNetworkBlockedError):
            await client.get("http://loopback.example/")
