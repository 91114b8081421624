#!/usr/bin/env python3
"""M3U playlist parsing utilities."""
from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlparse

import requests

from ..config_manager import DEFAULT_USER_AGENT
from ..errors import EmptyContentError
from .attributes import country_name, extract_attributes, language_code
from .dead_check import ThreadSessions, is_stream_alive
from .models import CountryInfo, LanguageInfo, StreamRecord, TvgInfo

logger = logging.getLogger(__name__)

ProgressCb = Callable[[str], None] | None

EXTINF_MARKER = '#EXTINF'

# Custom-protocol stream ids that are treated as live without probing
DIRECT_STREAM_RE = re.compile(r'acestream://[a-zA-Z0-9]+')

# Windows drive paths (C:\dir\file.ext) and POSIX absolute paths (/dir/file.ext)
FILE_PATH_RE = re.compile(
    r'^[a-zA-Z]:\\(?:[^\\/:*?"<>|]+\\)*[^\\/:*?"<>|]+\.\w{2,5}$'
    r'|^/(?:[^/]+/)*[^/]+\.\w{2,5}$'
)


def split_lines(content: str) -> List[str]:
    """Split playlist text on ``\\n`` into stripped, non-empty lines.

    Other line-break characters (form feed, U+2028, ...) stay inside the line.
    """
    return [line.strip() for line in content.split('\n') if line.strip()]



def find_entries(lines: List[str]) -> List[int]:
    """Return indexes of all metadata (#EXTINF) lines."""
    return [i for i, line in enumerate(lines) if EXTINF_MARKER in line]


def is_url(line: str) -> bool:
    """True for an absolute URL with a scheme and a host."""
    if any(c.isspace() for c in line):
        return False
    try:
        parsed = urlparse(line)
    except ValueError:
        return False
    return bool(re.fullmatch(r'[a-zA-Z][a-zA-Z0-9+.\-]*', parsed.scheme or '')) and bool(parsed.netloc)


def classify_entry(index: int, lines: List[str]) -> Tuple[Optional[str], bool]:
    """Find the stream link following the metadata line at ``index``.

    Up to two follower lines are examined. Directive lines (``#EXTVLCOPT`` and
    friends) are skipped, the first content line decides, and a following
    ``#EXTINF`` ends the search.

    Returns:
        ``(link, live)``; link is None when the entry has no usable link.
        ``live`` is True for direct stream ids and local files, which need no probe.
    """
    for offset in (1, 2):
        pos = index + offset
        if pos >= len(lines):
            break
        candidate = lines[pos]
        if EXTINF_MARKER in candidate:
            break
        if candidate.startswith('#'):
            continue
        if DIRECT_STREAM_RE.search(candidate):
            return candidate, True
        if is_url(candidate):
            return candidate, False
        if FILE_PATH_RE.match(candidate):
            return candidate, True
        break
    return None, False


def parse_entry(index: int, lines: List[str], *, check_live: bool = False,
                session: requests.Session | None = None,
                user_agent: str = DEFAULT_USER_AGENT,
                timeout: float = 5.0) -> Optional[StreamRecord]:
    """Build the record for the metadata line at ``index`` (None if it has no link)."""
    link, live = classify_entry(index, lines)
    if not link:
        logger.debug(f"Line {index}: no stream link, entry dropped")
        return None
    if check_live and not live:
        live = is_stream_alive(link, session=session, user_agent=user_agent, timeout=timeout)

    attrs = extract_attributes(lines[index])
    country = attrs['tvg-country']
    language = attrs['tvg-language']
    return StreamRecord(
        url=link,
        name=attrs['title'],
        logo=attrs['tvg-logo'],
        category=attrs['group-title'],
        live=live if check_live else None,
        tvg=TvgInfo(id=attrs['tvg-id'], name=attrs['tvg-name'], url=attrs['tvg-url']),
        country=CountryInfo(code=country, name=country_name(country)),
        language=LanguageInfo(code=language_code(language), name=language),
    )


def parse_streams(
    content: str,
    *,
    check_live: bool = True,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float = 5.0,
    retries: int = 3,
    max_workers: int = 20,
    progress_callback: ProgressCb = None,
) -> List[StreamRecord]:
    """
    Parse M3U playlist text into stream records.

    Every #EXTINF line is processed as its own unit on a thread pool so that
    liveness probes overlap. Results land in a slot per entry, so the returned
    list follows the playlist order whatever order the probes finish in.

    Args:
        content: Raw playlist text
        check_live: Probe each HTTP(S) link and set ``live`` on every record
        user_agent: User-Agent header for probes
        timeout: Probe timeout in seconds
        retries: Retry budget per probe
        max_workers: Maximum number of concurrent units
        progress_callback: Optional callback function for progress updates

    Returns:
        Stream records in playlist order

    Raises:
        EmptyContentError: if the text has no non-blank lines
    """
    lines = split_lines(content)
    if not lines:
        raise EmptyContentError()

    entries = find_entries(lines)
    total = len(entries)
    if progress_callback:
        progress_callback(f"Parsing {total} entries...")
    if not entries:
        logger.info("No #EXTINF entries found")
        return []

    workers = max(1, min(max_workers, total))
    sessions = ThreadSessions(user_agent=user_agent, retries=retries) if check_live else None
    results: List[Optional[StreamRecord]] = [None] * total

    def unit(line_no: int) -> Optional[StreamRecord]:
        return parse_entry(line_no, lines, check_live=check_live,
                           session=sessions.get() if sessions else None,
                           user_agent=user_agent, timeout=timeout)

    try:
        with ThreadPoolExecutor(max_workers=workers) as ex:
            futures = {ex.submit(unit, line_no): slot for slot, line_no in enumerate(entries)}
            for done, fut in enumerate(as_completed(futures), start=1):
                results[futures[fut]] = fut.result()
                if progress_callback and check_live and done % 10 == 0:
                    progress_callback(f"Checked {done}/{total} entries")
    finally:
        if sessions is not None:
            sessions.close()

    streams = [record for record in results if record is not None]
    msg = f"Parsed {len(streams)} streams from {total} entries"
    if check_live:
        msg += f" ({sum(1 for s in streams if s.live)} live)"
    logger.info(msg)
    if progress_callback:
        progress_callback(msg)
    return streams


__all__ = [
    "split_lines", "find_entries", "is_url", "classify_entry",
    "parse_entry", "parse_streams", "DIRECT_STREAM_RE", "FILE_PATH_RE",
]
