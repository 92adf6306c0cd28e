"""feedgate.integrations.pushover

Push one notification per new entry through the Pushover API.

The URL prefix is user-configurable (self-hosted gateways exist), so the
client is guarded unless the deployment allows private networks.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, ValidationError

from feedgate import USER_AGENT
from feedgate.core.client import ClientOptions, build_client
from feedgate.core.exceptions import EgressError, IntegrationError
from feedgate.core.models import Entry, Feed
from feedgate.security.redaction import redact_payload, redact_url

if TYPE_CHECKING:
    from feedgate.core.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_TIMEOUT_S = 10.0
DEFAULT_PUSHOVER_URL = "https://api.pushover.net"

MIN_PRIORITY = -2
MAX_PRIORITY = 2


class PushoverMessage(BaseModel):
    token: str
    user: str
    title: str
    message: str
    priority: int
    url: str
    url_title: str = ""
    device: str | None = None


class PushoverErrorResponse(BaseModel):
    user: str = ""
    errors: list[str] = []
    status: int = 0
    request: str = ""


class PushoverClient:
    def __init__(
        self,
        user: str,
        token: str,
        *,
        priority: int = 0,
        device: str = "",
        url_prefix: str = "",
        block_private_networks: bool = True,
        timeout_s: float = DEFAULT_CLIENT_TIMEOUT_S,
    ) -> None:
        self.user = user
        self.token = token
        self.device = device
        self.prefix = url_prefix or DEFAULT_PUSHOVER_URL
        self.priority = max(MIN_PRIORITY, min(MAX_PRIORITY, int(priority)))
        self._options = ClientOptions(timeout_s=timeout_s, block_private_networks=block_private_networks)

    @classmethod
    def from_settings(cls, settings: Settings, user: str, token: str, **kwargs: Any) -> PushoverClient:
        """Build a client whose egress policy follows the deployment flag."""

        return cls(user, token, block_private_networks=settings.block_private_networks, **kwargs)

    def send_messages(self, feed: Feed, entries: list[Entry]) -> None:
        if not self.token or not self.user:
            raise IntegrationError("pushover: token and user are required")

        for entry in entries:
            msg = PushoverMessage(
                user=self.user,
                token=self.token,
                device=self.device or None,
                message=entry.title,
                title=feed.title,
                priority=self.priority,
                url=entry.url,
            )

            self._make_request(msg)

    def _make_request(self, payload: PushoverMessage) -> None:
        url = self.prefix.rstrip("/") + "/1/messages.json"
        body = payload.model_dump(exclude_none=True)
        logger.debug("pushover_send_message", extra={"url": redact_url(url), "payload": redact_payload(body)})

        with build_client(self._options) as client:
            try:
                resp = client.post(url, json=body, headers={"User-Agent": USER_AGENT})
            except EgressError:
                raise
            except httpx.HTTPError as e:
                raise IntegrationError(f"pushover: unable to send request: {e}") from e

        if resp.status_code >= 400:
            error_message = f"{resp.status_code} {resp.reason_phrase}".strip()
            try:
                err = PushoverErrorResponse.model_validate_json(resp.content)
            except ValidationError:
                err = None
            if err is not None and err.errors:
                error_message = ",".join(err.errors)

            raise IntegrationError(
                f"pushover: API error: status={resp.status_code} {error_message}",
                status_code=resp.status_code,
            )
