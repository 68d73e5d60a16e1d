"""SmartFeed package: rebuilds the origin RSS feed for SmartNews ingestion."""

from .common import FetchError, http_get

__all__ = ["FetchError", "http_get"]
