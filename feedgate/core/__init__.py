"""feedgate.core

Core primitives: configuration, errors, models, and the client factory.

``feedgate.core.client`` is imported explicitly by callers; it depends on
``feedgate.security`` and is kept out of this namespace to avoid an import
cycle.
"""

from .config import Settings
from .exceptions import (
    EgressError,
    FeedgateError,
    IntegrationError,
    MalformedAddressError,
    PrivateNetworkBlockedError,
    ResolutionError,
)
from .models import Entry, Feed

__all__ = [
    "EgressError",
    "Entry",
    "Feed",
    "FeedgateError",
    "IntegrationError",
    "MalformedAddressError",
    "PrivateNetworkBlockedError",
    "ResolutionError",
    "Settings",
]
