#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SmartFeed – build dist/feed-smartnews.xml

Fetches the origin RSS feed and rewrites it for SmartNews:
• declares the snf/media/dc namespaces and adds the channel <snf:logo>
• per item: cleans content:encoded and caps its links (MAX_LINKS),
  adds a safe <media:thumbnail> / <dc:creator> from the article page when
  missing, strips tracking parameters from <link>, adds <snf:analytics>
• writes the result atomically

When anything goes wrong the output file is replaced by an <error> document
and the process exits with status 1.

Run:
  python3 -m smartfeed.build_smartnews
Env knobs (optional):
  FEED_URL, LOGO_URL, MAX_LINKS, SMARTNEWS_OUTPUT, HTTP_TIMEOUT,
  SMARTNEWS_USER_AGENT, ENRICH_AUTHOR
"""

from __future__ import annotations

import os
import pathlib
import re
import sys
import tempfile
import traceback
from typing import Callable

from . import common
from .common import LOGO_URL, MAX_LINKS, log
from .enrich import ArticleMeta, enrich_item, fetch_article_meta
from .fetcher import fetch_feed
from .normalize import normalize_document
from .render import render
from .sanitize import (
    canonicalize_link,
    clean_existing_thumbnail,
    has_thumbnail,
    sanitize_content,
)

ITEM_RE = re.compile(r"(?s)<item\b[^>]*>.*?</item>")

MetaFetcher = Callable[[str], ArticleMeta]


def rewrite_item(
    item: str,
    max_links: int = MAX_LINKS,
    fetch: MetaFetcher = fetch_article_meta,
) -> str:
    out = sanitize_content(item, max_links)
    if has_thumbnail(out):
        out = clean_existing_thumbnail(out)
    out = enrich_item(out, fetch=fetch)
    out = canonicalize_link(out)
    if "<snf:analytics>" not in out:
        idx = out.rfind("</item>")
        out = out[:idx] + render("analytics.xml") + out[idx:]
    return out


def rewrite_items(
    xml: str,
    max_links: int = MAX_LINKS,
    fetch: MetaFetcher = fetch_article_meta,
) -> str:
    items = ITEM_RE.findall(xml)
    log(f"Found {len(items)} <item> elements")
    return ITEM_RE.sub(lambda m: rewrite_item(m.group(0), max_links, fetch), xml)


def write_atomic(path: pathlib.Path, text: str) -> pathlib.Path:
    """Write ``text`` next to ``path`` first, then move it into place."""

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        # mkstemp creates 0600; the feed is a published static file
        os.chmod(tmp, 0o644)
        os.replace(tmp, path)
    except BaseException:
        pathlib.Path(tmp).unlink(missing_ok=True)
        raise
    return path


def build(
    feed_url: str | None = None,
    output: pathlib.Path | None = None,
    *,
    logo_url: str = LOGO_URL,
    max_links: int = MAX_LINKS,
    fetch_meta: MetaFetcher = fetch_article_meta,
) -> pathlib.Path:
    output = pathlib.Path(output or common.OUTPUT)
    xml = fetch_feed(feed_url or common.FEED_URL)
    xml = normalize_document(xml, logo_url=logo_url)
    xml = rewrite_items(xml, max_links=max_links, fetch=fetch_meta)
    write_atomic(output, xml)
    log("Wrote", output)
    return output


def render_error_document(exc: BaseException) -> str:
    detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).strip()
    return render("error.xml", detail=detail or repr(exc))


def write_error_document(exc: BaseException, output: pathlib.Path | None = None) -> pathlib.Path:
    return write_atomic(pathlib.Path(output or common.OUTPUT), render_error_document(exc))


def main(output: pathlib.Path | None = None) -> int:
    try:
        build(output=output)
    except Exception as exc:
        print("BUILD FAILED:", "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), file=sys.stderr)
        try:
            path = write_error_document(exc, output)
        except OSError as write_exc:
            print("Could not write diagnostic XML:", write_exc, file=sys.stderr)
        else:
            log("Wrote diagnostic XML to", path)
        return 1
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
