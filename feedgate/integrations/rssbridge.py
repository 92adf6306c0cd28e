"""feedgate.integrations.rssbridge

Feed discovery through an RSS-Bridge instance (``action=findfeed``).

The bridge URL is user-supplied, so requests are guarded unless the
deployment allows private networks.
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from feedgate import USER_AGENT
from feedgate.core.client import ClientOptions, build_client
from feedgate.core.exceptions import EgressError, IntegrationError
from feedgate.security.redaction import redact_url

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_TIMEOUT_S = 30.0


class BridgeMeta(BaseModel):
    name: str = ""


class Bridge(BaseModel):
    url: str
    bridge_meta: BridgeMeta = Field(default_factory=BridgeMeta, alias="bridgeMeta")

    model_config = {"populate_by_name": True}


_BRIDGE_LIST = TypeAdapter(list[Bridge])


def build_findfeed_url(rss_bridge_url: str, rss_bridge_token: str, website_url: str) -> str:
    try:
        parts = urlsplit(rss_bridge_url)
    except ValueError as e:
        raise IntegrationError(f"rssbridge: unable to parse bridge URL: {e}") from e
    if not parts.scheme or not parts.netloc:
        raise IntegrationError(f"rssbridge: unable to parse bridge URL: {rss_bridge_url!r}")

    values = parse_qsl(parts.query, keep_blank_values=True)
    if rss_bridge_token:
        values.append(("token", rss_bridge_token))
    values.extend([("action", "findfeed"), ("format", "atom"), ("url", website_url)])
    query = urlencode(sorted(values, key=lambda kv: kv[0]))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def detect_bridges(
    rss_bridge_url: str,
    rss_bridge_token: str,
    website_url: str,
    *,
    options: ClientOptions | None = None,
) -> list[Bridge]:
    """Return the bridges RSS-Bridge proposes for ``website_url``.

    A 404 from the bridge means nothing matched and yields an empty list.
    ``options`` normally comes from ``settings.client_options(DEFAULT_CLIENT_TIMEOUT_S)``;
    without it the request is guarded.
    """

    endpoint_url = build_findfeed_url(rss_bridge_url, rss_bridge_token, website_url)
    logger.debug("rssbridge_detect", extra={"url": redact_url(endpoint_url)})

    if options is None:
        options = ClientOptions(timeout_s=DEFAULT_CLIENT_TIMEOUT_S, block_private_networks=True)
    with build_client(options) as client:
        try:
            response = client.get(endpoint_url, headers={"User-Agent": USER_AGENT})
        except EgressError:
            raise
        except httpx.HTTPError as e:
            raise IntegrationError(f"rssbridge: unable to execute request: {e}") from e

    if response.status_code == 404:
        return []

    if response.status_code >= 400:
        raise IntegrationError(
            f"rssbridge: unexpected status code {response.status_code}",
            status_code=response.status_code,
        )

    try:
        bridges = _BRIDGE_LIST.validate_json(response.content)
    except ValidationError as e:
        raise IntegrationError(f"rssbridge: unable to decode bridge response: {e}") from e

    out: list[Bridge] = []
    for bridge in bridges:
        url = bridge.url
        logger.debug("rssbridge_found", extra={"bridge": bridge.bridge_meta.name, "url": redact_url(url)})

        if url.startswith("./"):
            url = rss_bridge_url + url[2:]
            logger.debug("rssbridge_rewrote_relative_url", extra={"bridge": bridge.bridge_meta.name, "url": redact_url(url)})

        if rss_bridge_token:
            url = url + "&token=" + rss_bridge_token

        out.append(bridge.model_copy(update={"url": url}))

    return out
