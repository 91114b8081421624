#!/usr/bin/env python3
"""Facade owning the parsed stream collection.

``M3UParser`` keeps two collections: the working list that filters, sorts
and shuffles mutate in place, and a backup captured right after each parse
that ``reset_operations`` restores from. The helpers in ``m3u.*`` do the
actual work.

    parser = M3UParser(timeout=5)
    parser.parse_m3u("https://iptv-org.github.io/iptv/countries/np.m3u")
    parser.remove_by_extension(["mp4"])
    parser.sort_by("name")
    print(parser.get_json())
"""
from __future__ import annotations

import copy
import logging
import os
from typing import Any, Dict, List, Sequence

from .config_manager import load_config, resolve_config
from .m3u.downloader import load_content as _load
from .m3u.exporter import save_to_file as _save, to_json as _to_json, to_m3u as _to_m3u
from .m3u.filters import filter_by as _filter, random_stream as _random, sort_by as _sort
from .m3u.models import StreamRecord
from .m3u.parser import parse_streams as _parse, split_lines as _split

logger = logging.getLogger(__name__)


class M3UParser:
    """Parse M3U playlists into stream records and query them."""

    def __init__(self, user_agent: str | None = None, timeout: float | None = None, *,
                 config: Dict[str, Any] | None = None, config_path: str | os.PathLike | None = None):
        """
        Args:
            user_agent: User-Agent for probes and downloads (overrides config)
            timeout: Request timeout in seconds (overrides config)
            config: Configuration dict (see ``config_manager.DEFAULT_CONFIG``)
            config_path: JSON config file, used when ``config`` is not given
        """
        base = config if config is not None else load_config(config_path)
        self.config = resolve_config(base, user_agent=user_agent, timeout=timeout)
        self.user_agent: str = self.config['user_agent']
        self.timeout: float = self.config['timeout']
        self.check_live = True
        self.lines: List[str] = []
        self._streams: List[StreamRecord] = []
        self._backup: List[StreamRecord] = []

    # --- parsing ----------------------------------------------------------
    def parse_m3u(self, source: Any, check_live: bool = True, progress_callback=None) -> None:
        """Load a playlist from a URL, local path or file object and parse it.

        Raises:
            RetrievalError: if the source cannot be read
            EmptyContentError: if it has no content
        """
        content = _load(source, user_agent=self.user_agent, timeout=self.timeout,
                        progress_callback=progress_callback)
        self.parse_text(content, check_live=check_live, progress_callback=progress_callback)

    def parse_text(self, content: str, check_live: bool = True, progress_callback=None) -> None:
        """Parse playlist text, replacing any previously parsed streams."""
        streams = _parse(
            content,
            check_live=check_live,
            user_agent=self.user_agent,
            timeout=self.timeout,
            retries=self.config['retries'],
            max_workers=self.config['max_workers'],
            progress_callback=progress_callback,
        )
        self.check_live = check_live
        self.lines = _split(content)
        self._streams = streams
        self._backup = copy.deepcopy(streams)

    # --- queries ------------------------------------------------------------
    def get_streams_info(self) -> List[StreamRecord]:
        return self._streams

    def get_streams_info_dicts(self) -> List[Dict[str, Any]]:
        return [s.as_dict() for s in self._streams]

    def reset_operations(self) -> None:
        """Undo filters, sorts and shuffles applied since the last parse."""
        self._streams = copy.deepcopy(self._backup)

    def filter_by(self, key: str, filters: Sequence[Any], retrieve: bool = True,
                  nested_key: bool = False, key_splitter: str = '-') -> None:
        """Retrieve or remove streams whose ``key`` matches any of ``filters``.

        Args:
            key: Single key (``name``) or nested key (``tvg-id``) when ``nested_key``
            filters: Regex fragments (or booleans for ``live``) joined with ``|``
            retrieve: True keeps matches, False removes them
            nested_key: Whether ``key`` is a group/member pair
            key_splitter: Separator between group and member (default ``-``)

        Raises:
            InvalidKeyError: on an unknown or malformed key
        """
        self._streams = _filter(self._streams, key, filters, retrieve=retrieve,
                                nested_key=nested_key, key_splitter=key_splitter)

    def retrieve_by_extension(self, extensions: Sequence[str]) -> None:
        self.filter_by('url', extensions, True)

    def remove_by_extension(self, extensions: Sequence[str]) -> None:
        self.filter_by('url', extensions, False)

    def retrieve_by_category(self, categories: Sequence[Any]) -> None:
        self.filter_by('category', categories, True)

    def remove_by_category(self, categories: Sequence[Any]) -> None:
        self.filter_by('category', categories, False)

    def sort_by(self, key: str, asc: bool = True, nested_key: bool = False, key_splitter: str = '-') -> None:
        """Sort streams by ``key``; absent values first when ascending, last otherwise."""
        _sort(self._streams, key, asc=asc, nested_key=nested_key, key_splitter=key_splitter)

    def get_random_stream(self, shuffle: bool = True) -> StreamRecord:
        """Return a random stream, shuffling the working list first when ``shuffle``.

        Raises:
            EmptyCollectionError: if there are no streams
        """
        return _random(self._streams, shuffle=shuffle)

    # --- output -------------------------------------------------------------
    def get_json(self, indent: int | None = 4) -> str:
        return _to_json(self._streams, indent=indent)

    def get_m3u(self) -> str:
        return _to_m3u(self._streams)

    def save_to_file(self, file_path: str | os.PathLike, format: str = 'json') -> str:
        """Save streams as JSON or M3U; the file extension, when present, picks the format."""
        return _save(self._streams, file_path, format)


__all__ = ["M3UParser"]
