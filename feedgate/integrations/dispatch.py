"""feedgate.integrations.dispatch

Best-effort integration runner.

One failing integration must not abort the rest of the pipeline or crash
the service. Policy blocks are logged louder than ordinary failures, and
only with the hostname.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from feedgate.core.exceptions import FeedgateError, PrivateNetworkBlockedError
from feedgate.security.redaction import redact_secrets

logger = logging.getLogger(__name__)


def dispatch_integration(name: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> bool:
    """Run ``func(*args, **kwargs)``; return True on success."""

    try:
        func(*args, **kwargs)
    except PrivateNetworkBlockedError as e:
        logger.warning("integration_target_blocked", extra={"integration": name, "host": e.host})
        return False
    except (FeedgateError, httpx.HTTPError) as e:
        logger.error("integration_failed", extra={"integration": name, "error_type": type(e).__name__, "error": redact_secrets(str(e))})
        return False

    logger.debug("integration_succeeded", extra={"integration": name})
    return True
