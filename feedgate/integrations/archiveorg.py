"""feedgate.integrations.archiveorg

Ask the Wayback Machine to snapshot an entry URL.

The endpoint is fixed and trusted, so this is the one integration that uses
the unguarded client.
"""

from __future__ import annotations

import logging
from urllib.parse import quote_plus

import httpx

from feedgate import USER_AGENT
from feedgate.core.client import ClientOptions, build_client
from feedgate.core.exceptions import EgressError, IntegrationError

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_TIMEOUT_S = 30.0
SAVE_ENDPOINT = "https://web.archive.org/save/"

# Wayback "Save Page Now" options: skip re-archiving anything saved in the last 15 days.
SAVE_OPTIONS = "delay_wb_availability=1&if_not_archived_within=15d"


def build_save_url(entry_url: str) -> str:
    return SAVE_ENDPOINT + quote_plus(entry_url) + "?" + SAVE_OPTIONS


class ArchiveOrgClient:
    def __init__(self, *, timeout_s: float = DEFAULT_CLIENT_TIMEOUT_S) -> None:
        self._options = ClientOptions(timeout_s=timeout_s)

    def send_url(self, entry_url: str) -> None:
        request_url = build_save_url(entry_url)
        logger.debug("archiveorg_save_request", extra={"entry_url": entry_url})

        with build_client(self._options) as client:
            try:
                response = client.get(request_url, headers={"User-Agent": USER_AGENT})
            except EgressError:
                raise
            except httpx.HTTPError as e:
                raise IntegrationError(f"archiveorg: unable to send request: {e}") from e

        if response.status_code >= 400:
            raise IntegrationError(
                f"archiveorg: unexpected status code: url={request_url} status={response.status_code}",
                status_code=response.status_code,
            )
