#!/usr/bin/env python3
"""JSON and M3U export utilities."""
from __future__ import annotations

import json
import logging
import os
from typing import List

from ..errors import UnsupportedFormatError
from .models import StreamRecord

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ('json', 'm3u')


def to_json(streams: List[StreamRecord], indent: int | None = 4) -> str:
    """Render records as a JSON array; absent fields become null."""
    return json.dumps([s.as_dict() for s in streams], indent=indent, ensure_ascii=False)


def to_m3u(streams: List[StreamRecord]) -> str:
    """Render records as M3U text.

    Only present attributes are written. ``live`` and the derived country and
    language names are not part of the format.
    """
    lines = ['#EXTM3U']
    for s in streams:
        extinf = '#EXTINF:-1'
        if s.tvg.id: extinf += f' tvg-id="{s.tvg.id}"'
        if s.tvg.name: extinf += f' tvg-name="{s.tvg.name}"'
        if s.tvg.url: extinf += f' tvg-url="{s.tvg.url}"'
        if s.logo: extinf += f' tvg-logo="{s.logo}"'
        if s.country.code: extinf += f' tvg-country="{s.country.code}"'
        if s.language.name: extinf += f' tvg-language="{s.language.name}"'
        if s.category: extinf += f' group-title="{s.category}"'
        if s.name: extinf += f',{s.name}'
        lines.append(extinf)
        lines.append(s.url)
    return '\n'.join(lines) + '\n'


def resolve_output(path: str | os.PathLike, fmt: str = 'json') -> tuple[str, str]:
    """Return ``(path, format)`` for a save request.

    The path's own extension wins; without one, ``fmt`` is used and appended.
    """
    path = os.fspath(path)
    ext = os.path.splitext(path)[1]
    if ext:
        fmt = ext[1:]
    else:
        path = f"{path}.{fmt}"
    fmt = fmt.lower()
    if fmt not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(f"Unsupported format '{fmt}', expected one of: {', '.join(SUPPORTED_FORMATS)}")
    return path, fmt


def save_to_file(streams: List[StreamRecord], path: str | os.PathLike, fmt: str = 'json', *, indent: int | None = 4) -> str:
    """Write records to ``path`` as JSON or M3U and return the path written."""
    output_path, fmt = resolve_output(path, fmt)
    content = to_json(streams, indent=indent) if fmt == 'json' else to_m3u(streams)
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(content)
    logger.info(f"Saved {len(streams)} streams to {os.path.basename(output_path)} ({fmt})")
    return output_path


__all__ = ["to_json", "to_m3u", "resolve_output", "save_to_file", "SUPPORTED_FORMATS"]
