#!/usr/bin/env python3
"""Filtering, sorting and random selection over stream records."""
from __future__ import annotations

import locale
import random
import re
from typing import Any, Iterable, List, Sequence, Tuple

from ..errors import EmptyCollectionError
from .models import StreamRecord, field_accessor


def _as_text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def build_pattern(filters: Iterable[Any]) -> re.Pattern[str]:
    """Join filters into one case-insensitive alternation (entries are regex fragments)."""
    return re.compile('|'.join(_as_text(f) for f in filters), re.IGNORECASE)


def filter_by(streams: List[StreamRecord], key: str, filters: Sequence[Any], *,
              retrieve: bool = True, nested_key: bool = False, key_splitter: str = '-') -> List[StreamRecord]:
    """Keep records whose ``key`` matches (``retrieve``) or does not match any filter.

    Absent values are matched as the empty string. An empty ``filters`` list
    returns the input unchanged.

    Raises:
        InvalidKeyError: on an unknown key or a malformed nested key
    """
    accessor = field_accessor(key, nested_key, key_splitter)
    if not filters:
        return streams
    pattern = build_pattern(filters)
    return [s for s in streams if bool(pattern.search(_as_text(accessor(s)))) == retrieve]


def collation_key(value: str) -> Tuple[str, str]:
    """Locale-aware sort key; case-folded first so case only breaks ties."""
    # strxfrm rejects embedded NUL characters
    value = value.replace('\x00', '')
    return locale.strxfrm(value.casefold()), locale.strxfrm(value)


def sort_by(streams: List[StreamRecord], key: str, *, asc: bool = True,
            nested_key: bool = False, key_splitter: str = '-') -> None:
    """Sort records in place by ``key``.

    Absent values come first when ascending and last when descending. The
    sort is stable in both directions.
    """
    accessor = field_accessor(key, nested_key, key_splitter)

    def sort_key(stream: StreamRecord):
        value = accessor(stream)
        if value is None:
            return (0, ('', ''))
        return (1, collation_key(_as_text(value)))

    streams.sort(key=sort_key, reverse=not asc)


def random_stream(streams: List[StreamRecord], *, shuffle: bool = True) -> StreamRecord:
    """Pick a record uniformly at random, shuffling the list in place first if asked."""
    if not streams:
        raise EmptyCollectionError("No streams to pick from")
    if shuffle:
        random.shuffle(streams)
    return random.choice(streams)


__all__ = ["filter_by", "sort_by", "random_stream", "build_pattern", "collation_key"]
