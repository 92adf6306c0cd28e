"""feedgate: egress-safe outbound HTTP for a self-hosted feed aggregator.

Every call the service makes on a user's behalf (archival, push
notifications, feed discovery) goes through one transport. That transport
decides where a TCP connection is allowed to land.
"""

from __future__ import annotations

__all__ = [
    "__version__",
    "USER_AGENT",
]

__version__ = "1.0.0"

USER_AGENT = f"feedgate/{__version__}"
