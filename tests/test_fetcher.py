"""
Tests for the URL title fetcher. requests.get is replaced with a streaming
fake; no network is used.
"""
import requests

from stak import fetcher
from stak.fetcher import fallback_title, fetch_url_title, truncate_title


class FakeResponse:
    def __init__(self, text="", status_code=200, chunks=None):
        self.status_code = status_code
        self.chunks = chunks if chunks is not None else [text.encode("utf-8")]
        self.read = 0
        self.closed = False

    def iter_content(self, chunk_size=1):
        for chunk in self.chunks:
            self.read += 1
            yield chunk

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True


def fake_get(response=None, error=None, calls=None):
    def get(url, timeout=None, headers=None, stream=False):
        if calls is not None:
            calls.append((url, timeout, stream))
        if error:
            raise error
        return response
    return get


def test_returns_stripped_title(monkeypatch):
    calls = []
    html = "<html><head><title>\n  The Go Programming Language  \n</title></head></html>"
    monkeypatch.setattr(fetcher.requests, "get", fake_get(FakeResponse(html), calls=calls))
    assert fetch_url_title("https://go.dev") == "The Go Programming Language"
    assert calls == [("https://go.dev", 5.0, True)]


def test_long_titles_are_truncated(monkeypatch):
    html = f"<title>{'x' * 150}</title>"
    monkeypatch.setattr(fetcher.requests, "get", fake_get(FakeResponse(html)))
    title = fetch_url_title("https://example.com")
    assert len(title) == 100
    assert title.endswith("...")


def test_non_200_falls_back_to_host(monkeypatch):
    monkeypatch.setattr(fetcher.requests, "get", fake_get(FakeResponse("<title>nope</title>", 404)))
    assert fetch_url_title("https://www.example.com/page") == "example.com"


def test_network_error_falls_back_to_host(monkeypatch):
    monkeypatch.setattr(fetcher.requests, "get", fake_get(error=requests.Timeout("slow")))
    assert fetch_url_title("https://docs.python.org/3/") == "docs.python.org"


def test_missing_or_empty_title_falls_back(monkeypatch):
    monkeypatch.setattr(fetcher.requests, "get", fake_get(FakeResponse("<html><body>hi</body></html>")))
    assert fetch_url_title("https://example.org") == "example.org"
    monkeypatch.setattr(fetcher.requests, "get", fake_get(FakeResponse("<title>   </title>")))
    assert fetch_url_title("https://example.org") == "example.org"


def test_fallback_without_host():
    assert fallback_title("not a url") == "Link"


def test_truncate_title_keeps_short_titles():
    assert truncate_title("  short  ") == "short"


def test_slow_body_is_cut_off_at_the_deadline(monkeypatch):
    ticks = iter(range(100))
    monkeypatch.setattr(fetcher, "monotonic", lambda: next(ticks))

    def drip():
        while True:
            yield b"<!-- still loading -->"

    response = FakeResponse(chunks=drip())
    monkeypatch.setattr(fetcher.requests, "get", fake_get(response))
    assert fetch_url_title("https://slow.example.com") == "slow.example.com"
    assert response.read <= 6
    assert response.closed


def test_body_read_is_capped(monkeypatch):
    chunk = b"x" * 4096
    chunks = [b"<title>Big page</title>"] + [chunk] * 1000
    response = FakeResponse(chunks=chunks)
    monkeypatch.setattr(fetcher.requests, "get", fake_get(response))
    assert fetch_url_title("https://big.example.com") == "Big page"
    assert response.read < len(chunks)
    assert response.read * 4096 <= fetcher.MAX_BODY_BYTES + 4096
