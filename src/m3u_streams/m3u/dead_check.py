#!/usr/bin/env python3
"""Stream liveness probing."""
from __future__ import annotations

import logging
import threading
from typing import List

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config_manager import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

RETRY_STATUSES = (429, 500, 502, 503, 504)


def create_session(*, user_agent: str = DEFAULT_USER_AGENT, retries: int = 3,
                   pool_size: int = 10) -> requests.Session:
    """Create a requests session that retries transient failures.

    Args:
        user_agent: User-Agent header sent with every request
        retries: Retry budget for connection/read errors and 429/5xx statuses
        pool_size: Connections kept per host (match the worker count)

    Returns:
        A session with a retrying adapter mounted for http and https
    """
    session = requests.Session()
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=0.3,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=frozenset(['GET']),
        # Hand back the last response instead of raising once retries run out
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount('http://', adapter)
    session.mount('https://', adapter)
    session.headers.update({'User-Agent': user_agent})
    return session


class ThreadSessions:
    """Hands each worker thread its own retrying session, created on first use.

    ``close`` closes every session handed out so far.
    """

    def __init__(self, *, user_agent: str = DEFAULT_USER_AGENT, retries: int = 3):
        self.user_agent = user_agent
        self.retries = retries
        self._local = threading.local()
        self._lock = threading.Lock()
        self._sessions: List[requests.Session] = []

    def get(self) -> requests.Session:
        session = getattr(self._local, 'session', None)
        if session is None:
            session = create_session(user_agent=self.user_agent, retries=self.retries, pool_size=1)
            self._local.session = session
            with self._lock:
                self._sessions.append(session)
        return session

    def close(self) -> None:
        with self._lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()


def is_stream_alive(url: str, *, session: requests.Session | None = None,
                    user_agent: str = DEFAULT_USER_AGENT, timeout: float = 5.0) -> bool:
    """Check if a stream URL answers a GET with HTTP 200.

    Only the response headers are awaited; the body is never read.

    Args:
        url: The stream URL to check
        session: Session to use (a retrying one is created when omitted)
        user_agent: User-Agent header for the request
        timeout: Request timeout in seconds (default: 5.0)

    Returns:
        True if the stream answered 200, False on any other status or error
    """
    owns_session = session is None
    if owns_session:
        session = create_session(user_agent=user_agent)
    try:
        resp = session.get(
            url,
            headers={'User-Agent': user_agent},
            timeout=timeout,
            stream=True,
            allow_redirects=True,
        )
        try:
            alive = resp.status_code == 200
        finally:
            resp.close()
        logger.debug(f"Probe {url}: HTTP {resp.status_code}")
        return alive
    except requests.exceptions.Timeout:
        logger.debug(f"Probe {url}: timed out after {timeout}s")
        return False
    except requests.exceptions.RequestException as e:
        logger.debug(f"Probe {url}: {e.__class__.__name__}: {e}")
        return False
    except Exception as e:  # noqa: BLE001
        # Malformed links can surface as non-requests errors; still dead
        logger.debug(f"Probe {url}: unexpected {e.__class__.__name__}: {e}")
        return False
    finally:
        if owns_session:
            session.close()


__all__ = ["create_session", "ThreadSessions", "is_stream_alive", "RETRY_STATUSES"]
