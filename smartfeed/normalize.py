#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Channel-level fixes: namespace declarations and the SmartNews logo.

Both steps look for what they would add before touching the document, so
running them on an already normalized feed returns it unchanged.
"""

from __future__ import annotations

import re

from .common import DC_NS, LOGO_URL, MEDIA_NS, SNF_NS
from .render import render

REQUIRED_NAMESPACES = (
    ("snf", SNF_NS),
    ("media", MEDIA_NS),
    ("dc", DC_NS),
)

RSS_OPEN_RE = re.compile(r"<rss\b([^>]*)>", re.I)
CHANNEL_OPEN_RE = re.compile(r"<channel\b[^>]*>", re.I)


def ensure_namespaces(xml: str) -> str:
    """Declare every prefix in ``REQUIRED_NAMESPACES`` on the ``<rss>`` tag."""

    m = RSS_OPEN_RE.search(xml)
    if not m:
        return xml
    attrs = m.group(1)
    missing = [
        f' xmlns:{prefix}="{uri}"'
        for prefix, uri in REQUIRED_NAMESPACES
        if not re.search(rf"\bxmlns:{prefix}\s*=", attrs)
    ]
    if not missing:
        return xml
    new_tag = f"<rss{attrs}{''.join(missing)}>"
    return xml[: m.start()] + new_tag + xml[m.end():]


def ensure_logo(xml: str, logo_url: str = LOGO_URL) -> str:
    """Insert ``<snf:logo>`` right after ``<channel>`` unless one exists."""

    if re.search(r"<snf:logo\b", xml):
        return xml
    m = CHANNEL_OPEN_RE.search(xml)
    if not m:
        return xml
    logo = render("logo.xml", logo_url=logo_url)
    return xml[: m.end()] + "\n    " + logo + xml[m.end():]


def normalize_document(xml: str, logo_url: str = LOGO_URL) -> str:
    return ensure_logo(ensure_namespaces(xml), logo_url=logo_url)
