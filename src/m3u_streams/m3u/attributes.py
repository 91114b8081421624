#!/usr/bin/env python3
"""Attribute extraction for #EXTINF metadata lines.

All patterns live in ``ATTRIBUTE_PATTERNS`` so they can be tested on their
own. Quoted attributes are matched case-insensitively and non-greedily; the
title is the free text after the last comma that is not inside a quoted
value.
"""
from __future__ import annotations

import re
from typing import Dict, Optional

import langcodes
import pycountry


def _quoted(attribute: str) -> re.Pattern[str]:
    # Lookbehind keeps "tvg-url" from matching inside "x-tvg-url"
    return re.compile(rf'(?<![\w-]){re.escape(attribute)}="(.*?)"', re.IGNORECASE)


ATTRIBUTE_PATTERNS: Dict[str, re.Pattern[str]] = {
    'tvg-name': _quoted('tvg-name'),
    'tvg-id': _quoted('tvg-id'),
    'tvg-logo': _quoted('tvg-logo'),
    'tvg-url': _quoted('tvg-url'),
    'tvg-country': _quoted('tvg-country'),
    'tvg-language': _quoted('tvg-language'),
    'group-title': _quoted('group-title'),
}

ATTRIBUTES = tuple(ATTRIBUTE_PATTERNS) + ('title',)


def get_value(line: str, attribute: str) -> Optional[str]:
    """Return the first value of ``attribute`` on ``line`` or None.

    Args:
        line: An #EXTINF line
        attribute: One of ``ATTRIBUTES``

    Returns:
        The captured value, or None when missing or empty
    """
    if attribute == 'title':
        return extract_title(line)
    try:
        pattern = ATTRIBUTE_PATTERNS[attribute]
    except KeyError:
        raise ValueError(f"Unknown attribute: {attribute}") from None
    match = pattern.search(line)
    if not match:
        return None
    return match.group(1) or None


def extract_title(line: str) -> Optional[str]:
    """Return the text after the last comma outside quoted values."""
    in_quotes = False
    last_comma = -1
    for idx, char in enumerate(line):
        if char == '"':
            in_quotes = not in_quotes
        elif char == ',' and not in_quotes:
            last_comma = idx
    if last_comma < 0:
        return None
    title = line[last_comma + 1:].strip()
    return title or None


def extract_attributes(line: str) -> Dict[str, Optional[str]]:
    """Extract every known attribute from an #EXTINF line."""
    return {attribute: get_value(line, attribute) for attribute in ATTRIBUTES}


# Short English names where the ISO 3166 list uses a formal variant
COUNTRY_NAME_OVERRIDES: Dict[str, str] = {
    'US': 'United States of America',
    'KR': 'South Korea',
    'KP': 'North Korea',
    'VN': 'Vietnam',
    'BO': 'Bolivia',
    'VE': 'Venezuela',
}


def country_name(code: str | None) -> Optional[str]:
    """English name for an ISO 3166 alpha-2/alpha-3/numeric code."""
    if not code:
        return None
    code = code.strip()
    if code.isdigit():
        country = pycountry.countries.get(numeric=code.zfill(3))
    elif len(code) == 2:
        country = pycountry.countries.get(alpha_2=code.upper())
    elif len(code) == 3:
        country = pycountry.countries.get(alpha_3=code.upper())
    else:
        return None
    if country is None:
        return None
    return COUNTRY_NAME_OVERRIDES.get(country.alpha_2, country.name)


def language_code(name: str | None) -> Optional[str]:
    """ISO 639-1 code for a language name, e.g. ``English`` or ``Deutsch``.

    English and native names are both accepted, in any case. Languages
    without a two-letter code (``Klingon`` -> ``tlh``) give None.
    """
    if not name or not name.strip():
        return None
    try:
        code = langcodes.find(name.strip()).language
    except LookupError:
        return None
    if code and len(code) == 2:
        return code
    return None


__all__ = [
    "ATTRIBUTES", "ATTRIBUTE_PATTERNS", "get_value", "extract_title",
    "extract_attributes", "country_name", "language_code",
]
