"""
URL TITLE FETCHER

Best-effort lookup of a page's <title>. Never raises: any failure falls back
to the URL's host name.

The body is streamed so the whole fetch is bounded by FETCH_TIMEOUT (not just
each socket read) and no more than MAX_BODY_BYTES are ever read.
"""
import logging
from time import monotonic
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

FETCH_TIMEOUT = 5.0
MAX_TITLE_LENGTH = 100
MAX_BODY_BYTES = 256 * 1024
CHUNK_SIZE = 4096
USER_AGENT = "stak/1.0 (+title fetcher)"


def fallback_title(url: str) -> str:
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        host = ""
    if host.startswith("www."):
        host = host[4:]
    return host or "Link"


def truncate_title(title: str) -> str:
    title = title.strip()
    if len(title) > MAX_TITLE_LENGTH:
        title = title[:MAX_TITLE_LENGTH - 3] + "..."
    return title


def read_body(response, deadline: float) -> bytes:
    """Read at most MAX_BODY_BYTES, raising requests.Timeout once deadline passes."""
    chunks = []
    size = 0
    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
        if monotonic() > deadline:
            raise requests.Timeout("title fetch exceeded its deadline")
        chunks.append(chunk)
        size += len(chunk)
        if size >= MAX_BODY_BYTES:
            break
    return b"".join(chunks)[:MAX_BODY_BYTES]


def fetch_url_title(url: str, timeout: float = FETCH_TIMEOUT) -> str:
    deadline = monotonic() + timeout
    try:
        with requests.get(url, timeout=timeout, headers={"User-Agent": USER_AGENT}, stream=True) as r:
            if r.status_code != 200:
                logging.debug(f"Title fetch for {url} returned HTTP {r.status_code}")
                return fallback_title(url)
            body = read_body(r, deadline)
        soup = BeautifulSoup(body, "html.parser")
        title = soup.title.get_text() if soup.title else ""
    except Exception as e:
        logging.debug(f"Title fetch for {url} failed: {e}")
        return fallback_title(url)
    title = truncate_title(title)
    return title or fallback_title(url)
