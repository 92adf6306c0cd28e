"""feedgate.core.models

The slice of the feed domain integrations need to see.
"""

from __future__ import annotations

from pydantic import BaseModel


class Feed(BaseModel):
    id: int | None = None
    title: str
    feed_url: str = ""
    site_url: str = ""

    model_config = {"frozen": True}


class Entry(BaseModel):
    id: int | None = None
    title: str
    url: str
    content: str = ""

    model_config = {"frozen": True}
