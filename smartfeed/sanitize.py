#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SmartFeed – item sanitizer

Pure text-to-text helpers applied to every <item> of the feed:
• strip_junk: drops nav/header/footer/aside/script/style blocks and the
  link-heavy widgets (related, share, newsletter, tags, ...) that SmartNews
  counts against the article.
• strip_unsafe_anchors: unwraps javascript:/data:/mailto:/tel: links and drops
  stand-alone "click here" style links (inside a sentence they are unwrapped).
• cap_anchors: keeps the first MAX_LINKS anchors, the rest become plain text.
• strip_tracking / canonicalize_link: removes utm_* and click-id parameters.
• sanitize_url / safe_thumbnail_url: https-only, image-extension-only URLs.

Nothing here performs I/O.
"""

from __future__ import annotations

import itertools
import re
from html import escape, unescape
from urllib.parse import quote, unquote_plus, urlsplit, urlunsplit

from .common import MAX_LINKS
from .render import render

# ------------------ Junk blocks ------------------
JUNK_TAGS = ("nav", "footer", "aside", "header", "script", "style", "noscript", "iframe")
DIV_JUNK = r"related|share|social|subscribe|breadcrumbs|tags|tag-?cloud|promo|newsletter|author|bio|widget|sidebar|footer"
UL_JUNK = r"related|share|social|tags|sources"
SECTION_JUNK = r"related|share|social|subscribe|tags|newsletter"

_JUNK_TAG_RE = re.compile(
    rf"(?is)<({'|'.join(JUNK_TAGS)})\b[^>]*>.*?</\1\s*>"
)


def _classed_block_re(tag: str, words: str) -> re.Pattern:
    return re.compile(
        rf"""(?is)<{tag}\b[^>]*?\bclass\s*=\s*(["'])[^"']*?\b({words})\b[^"']*\1[^>]*>.*?</{tag}\s*>"""
    )


_CLASSED_JUNK_RES = (
    _classed_block_re("div", DIV_JUNK),
    _classed_block_re("ul", UL_JUNK),
    _classed_block_re("section", SECTION_JUNK),
)


def strip_junk(html: str) -> str:
    if not html:
        return ""
    out = _JUNK_TAG_RE.sub("", html)
    for pattern in _CLASSED_JUNK_RES:
        out = pattern.sub("", out)
    return out


# ------------------ Anchors ------------------
ANCHOR_RE = re.compile(r"(?is)<a\b([^>]*)>(.*?)</a\s*>")
HREF_RE = re.compile(r"""(?is)\bhref\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>]+))""")

UNSAFE_SCHEMES = ("javascript:", "vbscript:", "data:", "mailto:", "tel:")
LOW_VALUE_TEXT = {
    "",
    "click here",
    "here",
    "read more",
    "learn more",
    "more",
    "continue reading",
    "share",
    "share this",
    "subscribe",
    "sign up",
    "follow us",
    "tweet",
    "pin it",
}


def _href(attrs: str) -> str:
    m = HREF_RE.search(attrs or "")
    if not m:
        return ""
    return next((g for g in m.groups() if g is not None), "")


def has_unsafe_scheme(url: str) -> bool:
    # browsers ignore whitespace/control characters inside the scheme
    compact = re.sub(r"[\x00-\x20]+", "", unescape(url or "")).lower()
    return compact.startswith(UNSAFE_SCHEMES)


def anchor_text(inner: str) -> str:
    text = re.sub(r"<[^>]+>", " ", inner or "")
    text = re.sub(r"\s+", " ", unescape(text)).strip().lower()
    return text.strip(" .:!?»«›>-–—…")


def _is_low_value(inner: str) -> bool:
    if re.search(r"(?i)<img\b", inner or ""):
        return False
    return anchor_text(inner) in LOW_VALUE_TEXT


def _stands_alone(m: re.Match) -> bool:
    """True when only markup/whitespace surrounds the anchor (e.g. ``<p><a>Read more</a></p>``)."""

    before = m.string[: m.start()].rstrip()
    after = m.string[m.end():].lstrip()
    return (not before or before.endswith(">")) and (not after or after.startswith("<"))


def strip_unsafe_anchors(html: str) -> str:
    """Unwrap unsafe-scheme anchors; drop stand-alone low-value links.

    A low-value link inside a sentence ("compare plans <a>here</a>") is
    unwrapped so the sentence keeps its words.
    """

    def rep(m: re.Match) -> str:
        attrs, inner = m.group(1), m.group(2)
        if has_unsafe_scheme(_href(attrs)):
            return inner
        if _is_low_value(inner):
            return "" if _stands_alone(m) else inner
        return m.group(0)

    return ANCHOR_RE.sub(rep, html or "")


def cap_anchors(html: str, max_links: int = MAX_LINKS) -> str:
    """Keep the first ``max_links`` anchors; later ones are replaced by their text."""

    counter = itertools.count(1)

    def rep(m: re.Match) -> str:
        return m.group(0) if next(counter) <= max_links else m.group(2)

    return ANCHOR_RE.sub(rep, html or "")


def sanitize_body(html: str, max_links: int = MAX_LINKS) -> str:
    body = strip_junk(html)
    body = strip_unsafe_anchors(body)
    return cap_anchors(body, max_links)


CONTENT_RE = re.compile(
    r"(?s)(<content:encoded>\s*<!\[CDATA\[)(.*?)(\]\]>\s*</content:encoded>)"
)


def sanitize_content(item: str, max_links: int = MAX_LINKS) -> str:
    """Run ``sanitize_body`` over the CDATA body of ``content:encoded``."""

    return CONTENT_RE.sub(
        lambda m: m.group(1) + sanitize_body(m.group(2), max_links) + m.group(3),
        item,
        count=1,
    )


# ------------------ Link canonicalization ------------------
TRACKING_PARAM_PREFIXES = ("utm_",)
TRACKING_PARAM_NAMES = {
    "fbclid",
    "gclid",
    "dclid",
    "igshid",
    "mc_cid",
    "mc_eid",
    "mkt_tok",
    "yclid",
    "gbraid",
    "wbraid",
}

LINK_RE = re.compile(r"<link>([^<]+)</link>")


def is_tracking_param(name: str) -> bool:
    if not name:
        return False
    lower = name.lower()
    if any(lower.startswith(prefix) for prefix in TRACKING_PARAM_PREFIXES):
        return True
    return lower in TRACKING_PARAM_NAMES


def strip_tracking(url: str) -> str:
    """Drop tracking parameters; every other parameter is kept verbatim and in order."""

    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if not parts.query:
        return url
    kept = [
        seg
        for seg in parts.query.split("&")
        if seg and not is_tracking_param(unquote_plus(seg.split("=", 1)[0]))
    ]
    return urlunsplit(parts._replace(query="&".join(kept)))


def canonicalize_link(item: str) -> str:
    m = LINK_RE.search(item)
    if not m:
        return item
    raw = m.group(1)
    url = unescape(raw.strip())
    cleaned = strip_tracking(url)
    if cleaned == url:
        return item
    return item[: m.start()] + f"<link>{escape(cleaned, quote=False)}</link>" + item[m.end():]


# ------------------ Thumbnail URLs ------------------
REJECTED_URL_RE = re.compile(r"(?i)^(data|mailto|tel|javascript|vbscript):")
ALLOWED_IMG_EXT = re.compile(r"(?i)\.(png|jpe?g|webp|gif)(\?|#|$)")
URL_SAFE_CHARS = ":/?#[]@!$&'()*+,;=%~"


def sanitize_url(u: str | None) -> str:
    """Return an absolute https:// URL or ``""`` when ``u`` is not acceptable."""

    s = (u or "").strip()
    if not s:
        return ""
    s = re.sub(r"\s", "%20", s)
    if REJECTED_URL_RE.match(s):
        return ""
    if s.startswith("//"):
        s = "https:" + s
    if not re.match(r"(?i)^https?://", s):
        return ""
    s = re.sub(r"(?i)^https?://", "https://", s)
    s = quote(s, safe=URL_SAFE_CHARS)
    try:
        if not urlsplit(s).netloc:
            return ""
    except ValueError:
        return ""
    return s


def is_allowed_image(url: str) -> bool:
    return bool(url) and bool(ALLOWED_IMG_EXT.search(url))


def safe_thumbnail_url(u: str | None) -> str:
    s = sanitize_url(u)
    return s if is_allowed_image(s) else ""


THUMBNAIL_RE = re.compile(r"(?is)<media:thumbnail\b([^>]*?)(?:/>|>\s*</media:thumbnail\s*>)")
URL_ATTR_RE = re.compile(r"""(?is)\burl\s*=\s*(["'])(.*?)\1""")


def has_thumbnail(item: str) -> bool:
    return bool(re.search(r"<media:thumbnail\b", item))


def thumbnail_tag(url: str) -> str:
    return render("thumbnail.xml", url=url)


def clean_existing_thumbnail(item: str) -> str:
    """Re-emit every ``media:thumbnail`` with a sanitized URL, or drop it."""

    def rep(m: re.Match) -> str:
        attr = URL_ATTR_RE.search(m.group(1))
        safe = safe_thumbnail_url(unescape(attr.group(2))) if attr else ""
        return thumbnail_tag(safe) if safe else ""

    return THUMBNAIL_RE.sub(rep, item)
