"""feedgate.core.exceptions

Errors are part of the interface.

Dial-level failures subclass ``httpx.TransportError`` without being httpcore
exceptions, so httpx's exception mapping lets them through untouched and
callers of ``Client.send()`` see the exact type raised by the dialer.
"""

from __future__ import annotations

import httpx


class FeedgateError(Exception):
    """Base exception for feedgate."""


class ConfigError(FeedgateError):
    """Configuration is missing, invalid, or inconsistent."""


class SecurityError(FeedgateError):
    """Security invariant violated."""


class InvalidAddressError(FeedgateError, ValueError):
    """Input is not an IP literal."""


class IntegrationError(FeedgateError):
    """A third-party integration rejected the request or answered garbage."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EgressError(FeedgateError, httpx.TransportError):
    """Outbound connection refused before any packet left the host."""


class PrivateNetworkBlockedError(EgressError, SecurityError):
    """Every address the host resolves to is non-public.

    Only the hostname is kept. Resolved addresses stay out of the message so
    internal topology does not leak into responses or logs.
    """

    def __init__(self, host: str) -> None:
        super().__init__(f"connection to private network is blocked: host {host!r} resolves to a non-public IP address")
        self.host = host


class ResolutionError(EgressError):
    """Name resolution failed or returned nothing."""

    def __init__(self, host: str, reason: str = "") -> None:
        msg = f"unable to resolve host {host!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.host = host


class MalformedAddressError(EgressError):
    """Host/port pair cannot be dialed. Usually a caller bug."""
