"""feedgate.security.dial

Connection-time address pinning.

The hostname is resolved inside ``connect_tcp`` and the socket is opened to
the literal IP that passed classification. Nothing re-resolves the name
afterwards, which is what defeats DNS rebinding: the address that was checked
is the address that was dialed.

Both backends plug into an httpcore connection pool, so every connection the
pool opens (first request, keep-alive replacement, redirects) goes through
here. No resolved-address cache: every dial resolves afresh.
"""

from __future__ import annotations

import logging
import socket
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

import anyio
import httpcore

from feedgate.core.exceptions import (
    InvalidAddressError,
    MalformedAddressError,
    PrivateNetworkBlockedError,
    ResolutionError,
)
from feedgate.security.ssrf import classify_ip

logger = logging.getLogger(__name__)

Resolver = Callable[[str, int], list[str]]
AsyncResolver = Callable[[str, int], Awaitable[list[str]]]


def _unique_addresses(infos: Iterable[tuple[Any, ...]]) -> list[str]:
    # getaddrinfo can repeat an address per socket type; keep resolver order.
    out: list[str] = []
    for _family, _type, _proto, _canon, sockaddr in infos:
        ip = str(sockaddr[0])
        if ip not in out:
            out.append(ip)
    return out


def system_resolver(host: str, port: int) -> list[str]:
    return _unique_addresses(socket.getaddrinfo(host, port, type=socket.SOCK_STREAM))


async def async_system_resolver(host: str, port: int) -> list[str]:
    return _unique_addresses(await anyio.getaddrinfo(host, port, type=socket.SOCK_STREAM))


def normalize_target(host: str, port: int) -> str:
    """Return the bare host, or raise if the pair cannot be dialed."""

    if not isinstance(host, str):
        raise MalformedAddressError(f"unable to parse address: host must be str, got {type(host).__name__}")
    bare = host.strip()
    if bare.startswith("[") and bare.endswith("]"):
        bare = bare[1:-1]
    if not bare:
        raise MalformedAddressError(f"unable to parse address {host!r}:{port!r}: missing host")
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise MalformedAddressError(f"unable to parse address {host!r}:{port!r}: invalid port")
    return bare


@dataclass(slots=True)
class DialAttempt:
    """State for one connection establishment. Never outlives it."""

    host: str
    port: int
    candidates: list[str] = field(default_factory=list)
    address: str | None = None

    def select(self) -> str:
        """First public candidate in resolver order wins."""

        if not self.candidates:
            raise ResolutionError(self.host, "no addresses returned")

        for ip in self.candidates:
            try:
                public = classify_ip(ip).is_public
            except InvalidAddressError:
                public = False
            if public:
                self.address = ip
                logger.debug(
                    "egress_address_selected",
                    extra={"host": self.host, "port": self.port, "address": ip, "candidates": len(self.candidates)},
                )
                return ip

        logger.warning("egress_blocked", extra={"host": self.host, "port": self.port, "candidates": len(self.candidates)})
        raise PrivateNetworkBlockedError(self.host)


class SafeNetworkBackend(httpcore.NetworkBackend):
    """Sync httpcore backend that only ever dials public IP literals.

    ``connect_timeout`` bounds the TCP connect only. Resolution goes through
    the blocking ``getaddrinfo`` call and is bounded by the system resolver's
    own timeout (``resolv.conf`` ``timeout``/``attempts``), not by this one.
    Use :class:`AsyncSafeNetworkBackend` when DNS needs a hard deadline.
    """

    def __init__(
        self,
        *,
        resolver: Resolver | None = None,
        inner: httpcore.NetworkBackend | None = None,
        connect_timeout: float | None = None,
    ) -> None:
        self._resolver = resolver or system_resolver
        self._inner = inner or httpcore.SyncBackend()
        self._connect_timeout = connect_timeout

    def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: float | None = None,
        local_address: str | None = None,
        socket_options: Iterable[Any] | None = None,
    ) -> httpcore.NetworkStream:
        attempt = DialAttempt(host=normalize_target(host, port), port=port)
        try:
            attempt.candidates = list(self._resolver(attempt.host, port))
        except (OSError, UnicodeError) as e:
            logger.info("egress_resolution_failed", extra={"host": attempt.host, "port": port})
            raise ResolutionError(attempt.host, str(e)) from e

        address = attempt.select()
        return self._inner.connect_tcp(
            address,
            port,
            timeout=timeout if timeout is not None else self._connect_timeout,
            local_address=local_address,
            socket_options=socket_options,
        )

    def connect_unix_socket(
        self,
        path: str,
        timeout: float | None = None,
        socket_options: Iterable[Any] | None = None,
    ) -> httpcore.NetworkStream:
        raise PrivateNetworkBlockedError(f"unix:{path}")

    def sleep(self, seconds: float) -> None:
        self._inner.sleep(seconds)


class AsyncSafeNetworkBackend(httpcore.AsyncNetworkBackend):
    """Async twin of :class:`SafeNetworkBackend`.

    Resolution runs under the connect timeout and inside the caller's cancel
    scope, so a cancelled request stops waiting on DNS immediately.
    """

    def __init__(
        self,
        *,
        resolver: AsyncResolver | None = None,
        inner: httpcore.AsyncNetworkBackend | None = None,
        connect_timeout: float | None = None,
    ) -> None:
        self._resolver = resolver or async_system_resolver
        self._inner = inner or httpcore.AnyIOBackend()
        self._connect_timeout = connect_timeout

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: float | None = None,
        local_address: str | None = None,
        socket_options: Iterable[Any] | None = None,
    ) -> httpcore.AsyncNetworkStream:
        attempt = DialAttempt(host=normalize_target(host, port), port=port)
        effective_timeout = timeout if timeout is not None else self._connect_timeout
        try:
            with anyio.fail_after(effective_timeout):
                attempt.candidates = list(await self._resolver(attempt.host, port))
        except TimeoutError as e:
            raise httpcore.ConnectTimeout(f"timed out resolving host {attempt.host!r}") from e
        except (OSError, UnicodeError) as e:
            logger.info("egress_resolution_failed", extra={"host": attempt.host, "port": port})
            raise ResolutionError(attempt.host, str(e)) from e

        address = attempt.select()
        return await self._inner.connect_tcp(
            address,
            port,
            timeout=effective_timeout,
            local_address=local_address,
            socket_options=socket_options,
        )

    async def connect_unix_socket(
        self,
        path: str,
        timeout: float | None = None,
        socket_options: Iterable[Any] | None = None,
    ) -> httpcore.AsyncNetworkStream:
        raise PrivateNetworkBlockedError(f"unix:{path}")

    async def sleep(self, seconds: float) -> None:
        await self._inner.sleep(seconds)
