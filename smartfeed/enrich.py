#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SmartFeed – thumbnail/author enrichment

Items that arrive without a <media:thumbnail> or <dc:creator> get them from
the linked article page:
  thumbnail: og:image (then twitter:image), https + image extension only
  author:    <meta name="author">, then JSON-LD "author", then trafilatura
             metadata
Every lookup is best effort. A failed fetch or parse leaves the item exactly
as it was and the build carries on with the next one.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from html import unescape
from typing import Any, Callable

from trafilatura.metadata import extract_metadata

from .common import ENRICH_AUTHOR, http_get, warn
from .sanitize import (
    LINK_RE,
    has_thumbnail,
    safe_thumbnail_url,
    thumbnail_tag,
)

HTML_ACCEPT = "text/html"


@dataclass
class ArticleMeta:
    thumbnail: str = ""
    author: str = ""


def _meta_content(html: str, attr: str, value: str) -> str:
    """Return ``content`` of ``<meta {attr}="{value}">`` in either attribute order."""

    v = re.escape(value)
    patterns = (
        rf"""<meta[^>]+{attr}\s*=\s*["']{v}["'][^>]*?\bcontent\s*=\s*["']([^"']+)["']""",
        rf"""<meta[^>]+\bcontent\s*=\s*["']([^"']+)["'][^>]*?{attr}\s*=\s*["']{v}["']""",
    )
    for pattern in patterns:
        m = re.search(pattern, html or "", re.I)
        if m:
            return unescape(m.group(1)).strip()
    return ""


def extract_og_image(html: str) -> str:
    return (
        _meta_content(html, "property", "og:image")
        or _meta_content(html, "name", "twitter:image")
        or _meta_content(html, "property", "twitter:image")
    )


# ---- author ----
JSONLD_RE = re.compile(
    r"""(?is)<script[^>]+type\s*=\s*["']application/ld\+json["'][^>]*>(.*?)</script\s*>"""
)


def _author_name(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, dict):
        return str(value.get("name") or "").strip()
    if isinstance(value, list):
        names = [_author_name(v) for v in value]
        return ", ".join(n for n in names if n)
    return ""


def _find_author(node: Any) -> str:
    if isinstance(node, list):
        for child in node:
            found = _find_author(child)
            if found:
                return found
        return ""
    if not isinstance(node, dict):
        return ""
    name = _author_name(node.get("author"))
    if name:
        return name
    return _find_author(node.get("@graph") or [])


def author_from_jsonld(html: str) -> str:
    for block in JSONLD_RE.findall(html or ""):
        try:
            data = json.loads(block.strip())
        except json.JSONDecodeError:
            continue
        found = _find_author(data)
        if found:
            return found
    return ""


def author_from_meta(html: str) -> str:
    author = _meta_content(html, "name", "author")
    if author:
        return author
    # article:author is frequently a profile URL rather than a name
    author = _meta_content(html, "property", "article:author")
    if author and not re.match(r"(?i)^https?://", author):
        return author
    return ""


def author_from_metadata(html: str) -> str:
    meta = extract_metadata(html)
    if meta is None:
        return ""
    return (getattr(meta, "author", None) or "").strip()


def extract_author(html: str) -> str:
    return author_from_meta(html) or author_from_jsonld(html) or author_from_metadata(html)


# ---- fetch + apply ----
def fetch_article_meta(link: str) -> ArticleMeta:
    """GET the article page and pull the thumbnail and author out of it."""

    html = http_get(link, accept=HTML_ACCEPT)
    thumbnail = extract_og_image(html)
    # a broken author lookup must not cost the item its thumbnail
    try:
        author = extract_author(html)
    except Exception as e:
        warn("Author lookup failed for", link, "->", e)
        author = ""
    return ArticleMeta(thumbnail=thumbnail, author=author)


def has_author(item: str) -> bool:
    return bool(re.search(r"<(dc:creator|author)\b", item))


def item_link(item: str) -> str:
    m = LINK_RE.search(item)
    if not m:
        return ""
    return unescape(m.group(1).strip()).split("?")[0]


def _author_tag(name: str) -> str:
    return "<dc:creator><![CDATA[" + name.replace("]]>", "]]]]><![CDATA[>") + "]]></dc:creator>"


def _append_to_item(item: str, fragment: str) -> str:
    idx = item.rfind("</item>")
    if idx < 0:
        return item
    return item[:idx] + fragment + item[idx:]


def enrich_item(item: str, fetch: Callable[[str], ArticleMeta] = fetch_article_meta) -> str:
    want_thumb = not has_thumbnail(item)
    want_author = ENRICH_AUTHOR and not has_author(item)
    if not (want_thumb or want_author):
        return item

    link = item_link(item)
    if not link:
        return item

    try:
        meta = fetch(link)
    except Exception as e:
        warn("Article lookup failed for", link, "->", e)
        return item

    out = item
    if want_thumb:
        thumb = safe_thumbnail_url(meta.thumbnail)
        if thumb:
            out = _append_to_item(out, thumbnail_tag(thumb))
        else:
            warn("Skip thumbnail (invalid or disallowed):", meta.thumbnail or "<none>")
    if want_author and meta.author:
        out = _append_to_item(out, _author_tag(meta.author))
    return out
