"""Fetch the origin RSS document."""

from __future__ import annotations

from .common import FEED_URL, http_get

RSS_ACCEPT = "application/rss+xml"


class FeedError(ValueError):
    """The origin answered, but not with an RSS document."""


def fetch_feed(url: str = FEED_URL) -> str:
    xml = http_get(url, accept=RSS_ACCEPT)
    if "<rss" not in xml:
        raise FeedError("Origin did not return RSS/XML (no <rss> tag)")
    return xml
