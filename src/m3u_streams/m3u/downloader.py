#!/usr/bin/env python3
"""Playlist retrieval from a URL, a local path or an in-memory buffer."""
from __future__ import annotations

import logging
import os
from typing import IO, Any, Callable
from urllib.parse import urlparse

import requests

from ..config_manager import DEFAULT_USER_AGENT
from ..errors import RetrievalError

logger = logging.getLogger(__name__)

ProgressCb = Callable[[str], None] | None


def is_remote(source: str) -> bool:
    return urlparse(source).scheme.lower() in ('http', 'https')


def download_m3u(url: str, *, user_agent: str = DEFAULT_USER_AGENT, timeout: float = 30,
                 session: requests.Session | None = None, progress_callback: ProgressCb = None) -> str:
    """Download a playlist and return its text.

    Raises:
        RetrievalError: on any network error or non-2xx status
    """
    if progress_callback:
        progress_callback("Downloading M3U playlist...")
    getter = session.get if session is not None else requests.get
    try:
        resp = getter(url, headers={'User-Agent': user_agent}, timeout=timeout)
        resp.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise RetrievalError(url, str(e)) from e
    if resp.encoding is None or resp.encoding.lower() == 'iso-8859-1':
        # Playlists without a charset are UTF-8 in practice
        resp.encoding = 'utf-8'
    if progress_callback:
        progress_callback("Download completed successfully!")
    logger.info(f"Downloaded playlist from {url} ({len(resp.text)} chars)")
    return resp.text


def read_m3u(path: str | os.PathLike) -> str:
    """Read a local playlist file as UTF-8 text."""
    try:
        with open(path, 'r', encoding='utf-8-sig') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise RetrievalError(os.fspath(path), str(e)) from e


def read_buffer(buffer: IO[Any]) -> str:
    """Read an open text or binary file object."""
    name = getattr(buffer, 'name', '<buffer>')
    try:
        data = buffer.read()
    except (OSError, ValueError) as e:
        raise RetrievalError(str(name), str(e)) from e
    if isinstance(data, bytes):
        try:
            return data.decode('utf-8-sig')
        except UnicodeDecodeError as e:
            raise RetrievalError(str(name), str(e)) from e
    return data


def load_content(source: Any, *, user_agent: str = DEFAULT_USER_AGENT, timeout: float = 30,
                 session: requests.Session | None = None, progress_callback: ProgressCb = None) -> str:
    """Resolve a URL, path or file object into playlist text.

    Raises:
        RetrievalError: when the source cannot be read
    """
    if hasattr(source, 'read'):
        return read_buffer(source)
    if isinstance(source, str) and is_remote(source):
        return download_m3u(source, user_agent=user_agent, timeout=timeout,
                            session=session, progress_callback=progress_callback)
    if isinstance(source, (str, os.PathLike)):
        return read_m3u(source)
    raise RetrievalError(repr(source), "expected a URL, a path or a file object")


__all__ = ["download_m3u", "read_m3u", "read_buffer", "load_content", "is_remote"]
