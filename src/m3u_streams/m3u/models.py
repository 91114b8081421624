#!/usr/bin/env python3
"""Stream record data structures and field selectors."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ..errors import InvalidKeyError


@dataclass
class TvgInfo:
    id: str | None = None
    name: str | None = None
    url: str | None = None

    def as_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'url': self.url}


@dataclass
class CountryInfo:
    code: str | None = None
    name: str | None = None

    def as_dict(self) -> Dict[str, Any]:
        return {'code': self.code, 'name': self.name}


@dataclass
class LanguageInfo:
    code: str | None = None
    name: str | None = None

    def as_dict(self) -> Dict[str, Any]:
        return {'code': self.code, 'name': self.name}


@dataclass
class StreamRecord:
    """One playlist entry resolved to a stream link.

    ``live`` stays None unless liveness checking was requested for the parse
    that produced the record.
    """
    url: str
    name: str | None = None
    logo: str | None = None
    category: str | None = None
    live: bool | None = None
    tvg: TvgInfo = field(default_factory=TvgInfo)
    country: CountryInfo = field(default_factory=CountryInfo)
    language: LanguageInfo = field(default_factory=LanguageInfo)

    def as_dict(self) -> Dict[str, Any]:
        """JSON shape of the record.

        ``live`` is left out, not rendered as false, when it was never checked.
        """
        data: Dict[str, Any] = {
            'name': self.name,
            'logo': self.logo,
            'url': self.url,
            'category': self.category,
        }
        if self.live is not None:
            data['live'] = self.live
        data['tvg'] = self.tvg.as_dict()
        data['country'] = self.country.as_dict()
        data['language'] = self.language.as_dict()
        return data


Accessor = Callable[[StreamRecord], Optional[Any]]

# Key token -> accessor. Anything not listed here is an invalid key.
TOP_LEVEL_FIELDS: Dict[str, Accessor] = {
    'name': lambda s: s.name,
    'logo': lambda s: s.logo,
    'url': lambda s: s.url,
    'category': lambda s: s.category,
    'live': lambda s: s.live,
}

NESTED_FIELDS: Dict[str, Dict[str, Accessor]] = {
    'tvg': {
        'id': lambda s: s.tvg.id,
        'name': lambda s: s.tvg.name,
        'url': lambda s: s.tvg.url,
    },
    'country': {
        'code': lambda s: s.country.code,
        'name': lambda s: s.country.name,
    },
    'language': {
        'code': lambda s: s.language.code,
        'name': lambda s: s.language.name,
    },
}


def field_accessor(key: str, nested_key: bool = False, key_splitter: str = '-') -> Accessor:
    """Resolve a key like ``name`` or ``tvg-id`` to a record accessor.

    Raises:
        InvalidKeyError: if a nested key does not split into exactly two
            non-empty parts, or if the key names no known field.
    """
    if not nested_key:
        try:
            return TOP_LEVEL_FIELDS[key]
        except KeyError:
            raise InvalidKeyError(f"Invalid key: {key}") from None
    parts = key.split(key_splitter) if key_splitter else [key]
    if len(parts) != 2 or not all(parts):
        raise InvalidKeyError(f"Invalid nested key: {key} with keySplitter: {key_splitter}")
    group, member = parts
    try:
        return NESTED_FIELDS[group][member]
    except KeyError:
        raise InvalidKeyError(f"Invalid nested key: {key} with keySplitter: {key_splitter}") from None


__all__ = [
    "StreamRecord", "TvgInfo", "CountryInfo", "LanguageInfo",
    "TOP_LEVEL_FIELDS", "NESTED_FIELDS", "field_accessor",
]
