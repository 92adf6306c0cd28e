"""feedgate.core.client

HTTP client factory shared by every integration.

- unguarded: a plain httpx client with a timeout (trusted, fixed endpoints)
- guarded: same client, but its connection pool dials through
  :mod:`feedgate.security.dial`, so connections only land on public IPs

The factory never reads configuration. Callers pass the policy flag in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpcore
import httpx

from feedgate.core.exceptions import ConfigError
from feedgate.security.dial import AsyncResolver, AsyncSafeNetworkBackend, Resolver, SafeNetworkBackend


@dataclass(frozen=True, slots=True)
class ClientOptions:
    timeout_s: float = 30.0
    block_private_networks: bool = False

    def __post_init__(self) -> None:
        if not float(self.timeout_s) > 0:
            raise ConfigError(f"timeout_s must be > 0, got {self.timeout_s!r}")


class SafeHTTPTransport(httpx.HTTPTransport):
    """httpx transport whose pool dials through :class:`SafeNetworkBackend`."""

    def __init__(
        self,
        *,
        resolver: Resolver | None = None,
        inner_backend: httpcore.NetworkBackend | None = None,
        connect_timeout: float | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._network_backend = SafeNetworkBackend(
            resolver=resolver,
            inner=inner_backend,
            connect_timeout=connect_timeout,
        )
        # httpx has no public hook for the dialer; the pool reads this attribute
        # every time it opens a connection.
        self._pool._network_backend = self._network_backend

    @property
    def network_backend(self) -> SafeNetworkBackend:
        return self._network_backend


class AsyncSafeHTTPTransport(httpx.AsyncHTTPTransport):
    """Async transport whose pool dials through :class:`AsyncSafeNetworkBackend`."""

    def __init__(
        self,
        *,
        resolver: AsyncResolver | None = None,
        inner_backend: httpcore.AsyncNetworkBackend | None = None,
        connect_timeout: float | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._network_backend = AsyncSafeNetworkBackend(
            resolver=resolver,
            inner=inner_backend,
            connect_timeout=connect_timeout,
        )
        self._pool._network_backend = self._network_backend

    @property
    def network_backend(self) -> AsyncSafeNetworkBackend:
        return self._network_backend


def build_client(options: ClientOptions) -> httpx.Client:
    """Build a sync client. No I/O happens here."""

    if not options.block_private_networks:
        return httpx.Client(timeout=options.timeout_s)

    transport = SafeHTTPTransport(connect_timeout=options.timeout_s)
    return httpx.Client(timeout=options.timeout_s, transport=transport)


def build_async_client(options: ClientOptions) -> httpx.AsyncClient:
    if not options.block_private_networks:
        return httpx.AsyncClient(timeout=options.timeout_s)

    transport = AsyncSafeHTTPTransport(connect_timeout=options.timeout_s)
    return httpx.AsyncClient(timeout=options.timeout_s, transport=transport)


def has_safe_dialer(client: httpx.Client | httpx.AsyncClient) -> bool:
    """True when the client's default transport pins connections to public IPs."""

    transport = getattr(client, "_transport", None)
    return isinstance(transport, SafeHTTPTransport | AsyncSafeHTTPTransport)
