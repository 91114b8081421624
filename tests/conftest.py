"""Pytest fixtures for playlist parsing tests.

Nothing here touches the network: probes and downloads are replaced with
fakes through monkeypatch.
"""
import pytest

from m3u_streams.m3u_processor import M3UParser


SAMPLE_M3U = """#EXTM3U x-tvg-url="https://epg.example.com/guide.xml"
#EXTINF:-1 tvg-id="BBCNews.uk" tvg-name="BBC News" tvg-logo="https://img.example.com/bbc.png" tvg-country="GB" tvg-language="English" group-title="News",BBC News HD
https://example.com/bbc.m3u8

#EXTINF:-1 tvg-id="ESPN.us" tvg-country="US" tvg-language="English" group-title="Sports",ESPN
http://example.com/espn.ts
#EXTINF:-1 tvg-name="Kantipur" tvg-country="NP" tvg-language="Nepali" group-title="General",Kantipur TV
#EXTVLCOPT:http-user-agent=VLC
https://example.com/kantipur.m3u8
#EXTINF:-1 group-title="Sports",Ace Match
acestream://0123456789abcdef
#EXTINF:-1 tvg-id="Local.file",Holiday Movie
/media/movies/holiday.mp4
#EXTINF:-1 tvg-id="Broken",No Link Here
#EXTINF:-1 tvg-country="XX" tvg-language="Klingon",Mystery Channel
https://example.com/mystery.mp4
#EXTINF:-1 group-title="news",Trailing Entry
"""


class FakeResponse:
    def __init__(self, status_code=200, text=""):
        self.status_code = status_code
        self.text = text
        self.encoding = "utf-8"
        self.closed = False

    def close(self):
        self.closed = True

    def raise_for_status(self):
        import requests
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Stand-in for requests.Session recording calls.

    ``responses`` maps URL -> status code or exception instance.
    """

    def __init__(self, responses=None, default=200):
        self.responses = responses or {}
        self.default = default
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        outcome = self.responses.get(url, self.default)
        if isinstance(outcome, Exception):
            raise outcome
        return FakeResponse(outcome)

    def close(self):
        pass


@pytest.fixture
def sample_m3u() -> str:
    return SAMPLE_M3U


@pytest.fixture
def sample_file(tmp_path, sample_m3u):
    path = tmp_path / "sample.m3u"
    path.write_text(sample_m3u, encoding="utf-8")
    return path


@pytest.fixture
def parser(sample_m3u) -> M3UParser:
    """A parser loaded with the sample playlist, liveness checking off."""
    p = M3UParser(config={"max_workers": 4})
    p.parse_text(sample_m3u, check_live=False)
    return p


@pytest.fixture
def session_factory():
    """The FakeSession class, for tests that build their own responses."""
    return FakeSession
