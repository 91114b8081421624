import threading
import time

import pytest

from m3u_streams.errors import EmptyContentError
from m3u_streams.m3u import parser as parser_mod
from m3u_streams.m3u.parser import classify_entry, find_entries, is_url, parse_streams, split_lines


BBC_M3U = """#EXTM3U
#EXTINF:-1 tvg-id="BBC" tvg-name="BBC News" group-title="News",BBC News HD
https://example.com/bbc.m3u8
"""


def test_split_lines_strips_and_drops_blank_lines():
    assert split_lines("  #EXTM3U \r\n\n\t\n#EXTINF:-1,A\n  url  \n") == ['#EXTM3U', '#EXTINF:-1,A', 'url']


def test_find_entries():
    lines = ['#EXTM3U', '#EXTINF:-1,A', 'http://a/1', '#EXTINF:-1,B', 'http://a/2']
    assert find_entries(lines) == [1, 3]


@pytest.mark.parametrize("line,expected", [
    ("https://example.com/live.m3u8", True),
    ("rtmp://media.example.com/app/stream", True),
    ("udp://239.0.0.1:1234", True),
    ("example.com/live.m3u8", False),
    ("https://", False),
    ("http://exa mple.com/x", False),
    ("/media/file.mp4", False),
])
def test_is_url(line, expected):
    assert is_url(line) is expected


def test_classify_http_link_is_pending_probe():
    assert classify_entry(0, ['#EXTINF:-1,A', 'https://example.com/a.m3u8']) == ('https://example.com/a.m3u8', False)


def test_classify_direct_stream_is_live():
    assert classify_entry(0, ['#EXTINF:-1,A', 'acestream://abc123']) == ('acestream://abc123', True)


@pytest.mark.parametrize("path", ['/media/movies/film.mp4', 'C:\\Videos\\film.mkv'])
def test_classify_local_file_is_live(path):
    assert classify_entry(0, ['#EXTINF:-1,A', path]) == (path, True)


def test_classify_skips_directive_lines():
    lines = ['#EXTINF:-1,A', '#EXTVLCOPT:http-referrer=x', 'http://example.com/a.ts']
    assert classify_entry(0, lines) == ('http://example.com/a.ts', False)


def test_classify_stops_at_first_content_line():
    lines = ['#EXTINF:-1,A', 'not a link', 'http://example.com/a.ts']
    assert classify_entry(0, lines) == (None, False)


def test_classify_does_not_steal_next_entry_link():
    lines = ['#EXTINF:-1,A', '#EXTINF:-1,B', 'http://example.com/b.ts']
    assert classify_entry(0, lines) == (None, False)
    assert classify_entry(1, lines) == ('http://example.com/b.ts', False)


def test_classify_without_followers():
    assert classify_entry(0, ['#EXTINF:-1,A']) == (None, False)


def test_bbc_scenario():
    streams = parse_streams(BBC_M3U, check_live=False)
    assert len(streams) == 1
    record = streams[0].as_dict()
    assert record['name'] == 'BBC News HD'
    assert record['url'] == 'https://example.com/bbc.m3u8'
    assert record['category'] == 'News'
    assert record['tvg'] == {'id': 'BBC', 'name': 'BBC News', 'url': None}
    assert record['logo'] is None
    assert record['country'] == {'code': None, 'name': None}
    assert record['language'] == {'code': None, 'name': None}
    assert 'live' not in record


def test_metadata_line_without_follower_produces_nothing():
    assert parse_streams("#EXTM3U\n#EXTINF:-1,Lonely", check_live=False) == []


@pytest.mark.parametrize("content", ["", "   \n\n\t  \r\n"])
def test_empty_content_raises(content):
    with pytest.raises(EmptyContentError):
        parse_streams(content, check_live=False)


def test_sample_playlist(sample_m3u):
    streams = parse_streams(sample_m3u, check_live=False)
    assert [s.name for s in streams] == [
        'BBC News HD', 'ESPN', 'Kantipur TV', 'Ace Match', 'Holiday Movie', 'Mystery Channel',
    ]
    assert all(s.url for s in streams)
    assert all(s.live is None for s in streams)

    bbc, espn, kantipur, _, holiday, mystery = streams
    assert bbc.logo == 'https://img.example.com/bbc.png'
    assert bbc.country.code == 'GB'
    assert bbc.country.name == 'United Kingdom'
    assert bbc.language.name == 'English'
    assert bbc.language.code == 'en'
    assert espn.country.name == 'United States of America'
    assert kantipur.url == 'https://example.com/kantipur.m3u8'
    assert kantipur.language.code == 'ne'
    assert kantipur.tvg.id is None
    assert holiday.category is None
    assert mystery.country.code == 'XX'
    assert mystery.country.name is None
    assert mystery.language.code is None
    assert mystery.language.name == 'Klingon'


def test_check_live_probes_only_pending_links(monkeypatch, sample_m3u):
    probed = []

    def fake_probe(url, **kwargs):
        probed.append(url)
        return url.endswith('.m3u8')

    monkeypatch.setattr(parser_mod, 'is_stream_alive', fake_probe)
    streams = parse_streams(sample_m3u, check_live=True, max_workers=4)

    assert sorted(probed) == sorted([
        'https://example.com/bbc.m3u8',
        'http://example.com/espn.ts',
        'https://example.com/kantipur.m3u8',
        'https://example.com/mystery.mp4',
    ])
    live = {s.name: s.live for s in streams}
    assert live == {
        'BBC News HD': True,
        'ESPN': False,
        'Kantipur TV': True,
        'Ace Match': True,
        'Holiday Movie': True,
        'Mystery Channel': False,
    }


def test_order_follows_playlist_not_probe_completion(monkeypatch):
    count = 12
    content = "#EXTM3U\n" + "\n".join(
        f'#EXTINF:-1,Channel {i}\nhttp://example.com/{i}.ts' for i in range(count)
    )
    lock = threading.Lock()
    finished = []

    def slow_probe(url, **kwargs):
        idx = int(url.rsplit('/', 1)[1].split('.')[0])
        # Earlier entries take longer so they finish last
        time.sleep((count - idx) * 0.01)
        with lock:
            finished.append(idx)
        return True

    monkeypatch.setattr(parser_mod, 'is_stream_alive', slow_probe)
    streams = parse_streams(content, check_live=True, max_workers=count)

    assert finished != sorted(finished)
    assert [s.name for s in streams] == [f'Channel {i}' for i in range(count)]
    assert all(s.live for s in streams)


def test_liveness_checks_get_one_session_per_thread(monkeypatch):
    content = "\n".join(f'#EXTINF:-1,Channel {i}\nhttp://example.com/{i}.ts' for i in range(8))
    lock = threading.Lock()
    seen = {}

    def check(url, *, session=None, **kwargs):
        time.sleep(0.01)
        with lock:
            seen.setdefault(threading.get_ident(), set()).add(id(session))
        return True

    monkeypatch.setattr(parser_mod, 'is_stream_alive', check)
    parse_streams(content, check_live=True, max_workers=4)

    assert all(len(ids) == 1 for ids in seen.values())
    per_thread = [next(iter(ids)) for ids in seen.values()]
    assert len(set(per_thread)) == len(per_thread)


def test_only_newline_splits_lines():
    content = '#EXTINF:-1,Foo Bar\nhttp://e/a.ts\n#EXTINF:-1,Form\x0cFeed Extra\r\nhttp://e/b.ts'
    assert split_lines(content)[2] == '#EXTINF:-1,Form\x0cFeed Extra'
    streams = parse_streams(content, check_live=False)
    assert [s.url for s in streams] == ['http://e/a.ts', 'http://e/b.ts']
    assert streams[1].name == 'Form\x0cFeed Extra'


def test_record_count_matches_resolvable_entries():
    content = "\n".join([
        '#EXTINF:-1,A', 'http://example.com/a',
        '#EXTINF:-1,B', 'garbage',
        '#EXTINF:-1,C', '#EXTVLCOPT:x', 'http://example.com/c',
        '#EXTINF:-1,D',
    ])
    streams = parse_streams(content, check_live=False)
    assert [s.name for s in streams] == ['A', 'C']


def test_progress_callback_receives_messages(sample_m3u):
    messages = []
    parse_streams(sample_m3u, check_live=False, progress_callback=messages.append)
    assert messages[0] == 'Parsing 8 entries...'
    assert messages[-1] == 'Parsed 6 streams from 8 entries'
