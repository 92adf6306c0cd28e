"""feedgate.integrations

Third-party integrations. Each builds its own client through
``feedgate.core.client`` and lets egress errors propagate unchanged.
"""

from feedgate.integrations.archiveorg import ArchiveOrgClient
from feedgate.integrations.dispatch import dispatch_integration
from feedgate.integrations.pushover import PushoverClient
from feedgate.integrations.rssbridge import Bridge, detect_bridges

__all__ = [
    "ArchiveOrgClient",
    "Bridge",
    "PushoverClient",
    "detect_bridges",
    "dispatch_integration",
]
