#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Shared configuration, HTTP and console helpers for the SmartNews build."""

from __future__ import annotations

import os
import pathlib
import socket
import sys
import urllib.error
import urllib.request


def _env_int(name: str, default: int) -> int:
    """Return an integer from the environment or ``default`` on failure."""

    raw = os.getenv(name)
    if raw is None:
        return default
    raw = raw.strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        warn(f"Invalid {name}={raw!r}; falling back to {default}")
        return default


def _env_flag(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw not in ("0", "false", "no", "off")


def log(*parts) -> None:
    print(*parts)


def warn(*parts) -> None:
    print("[WARN]", *parts, file=sys.stderr)


# ------------------ Config ------------------
TEMPLATES_DIR = pathlib.Path(__file__).resolve().parent / "templates"

FEED_URL = os.getenv("FEED_URL", "https://www.cabletv.com/feed").strip()
LOGO_URL = os.getenv("LOGO_URL", "https://i.ibb.co/sptKgp34/CTV-Feed-Logo.png").strip()  # 700x100 PNG
MAX_LINKS = _env_int("MAX_LINKS", 12)
OUTPUT = pathlib.Path(
    os.getenv("SMARTNEWS_OUTPUT") or (pathlib.Path("dist") / "feed-smartnews.xml")
)
HTTP_TIMEOUT = _env_int("HTTP_TIMEOUT", 20)
UA = os.getenv(
    "SMARTNEWS_USER_AGENT",
    "Mozilla/5.0 (compatible; SmartNews-Feed-Builder/1.1; +https://CTV-Clearlink.github.io)",
)
ENRICH_AUTHOR = _env_flag("ENRICH_AUTHOR", True)

SNF_NS = "http://www.smartnews.be/snf"
MEDIA_NS = "http://search.yahoo.com/mrss/"
DC_NS = "http://purl.org/dc/elements/1.1/"


# ------------------ HTTP ------------------
class FetchError(RuntimeError):
    """Raised when a GET does not come back with a 2xx response."""

    def __init__(self, url: str, status: int | None = None, reason: str = "") -> None:
        self.url = url
        self.status = status
        self.reason = reason
        detail = " ".join(str(p) for p in (status, reason) if p not in (None, ""))
        super().__init__(f"Fetch {url} failed: {detail}".rstrip())


def _decode(raw: bytes) -> str:
    for enc in ("utf-8", "utf-16", "iso-8859-1"):
        try:
            return raw.decode(enc)
        except Exception:
            continue
    return raw.decode("utf-8", "ignore")


def http_get(url: str, accept: str = "*/*", timeout: int | None = None) -> str:
    headers = {"User-Agent": UA, "Accept": accept}
    req = urllib.request.Request(url, headers=headers)
    try:
        with urllib.request.urlopen(req, timeout=timeout or HTTP_TIMEOUT) as r:
            status = getattr(r, "status", 200)
            if not 200 <= status < 300:
                raise FetchError(url, status, getattr(r, "reason", ""))
            raw = r.read()
    except urllib.error.HTTPError as e:
        raise FetchError(url, e.code, str(e.reason or "")) from e
    except (urllib.error.URLError, socket.timeout) as e:
        reason = getattr(e, "reason", e)
        raise FetchError(url, None, str(reason)) from e
    return _decode(raw)
