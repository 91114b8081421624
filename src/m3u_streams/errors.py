#!/usr/bin/env python3
"""Exception types raised by the M3U stream parser."""
from __future__ import annotations


class M3UStreamsError(Exception):
    """Base class for all errors raised by m3u_streams."""


class EmptyContentError(M3UStreamsError):
    """Raised when a playlist has no usable (non-blank) lines."""

    def __init__(self, message: str = "No content found to parse"):
        super().__init__(message)


class InvalidKeyError(M3UStreamsError, ValueError):
    """Raised for an unknown field key or a nested key that does not split in two."""


class RetrievalError(M3UStreamsError):
    """Raised when a path, URL or buffer cannot be turned into playlist text."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to retrieve {source}: {reason}")


class EmptyCollectionError(M3UStreamsError):
    """Raised when a random stream is requested from an empty collection."""


class UnsupportedFormatError(M3UStreamsError, ValueError):
    """Raised when saving to a format other than json or m3u."""
