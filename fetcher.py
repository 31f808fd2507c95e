"""Deadline-bounded HTTP GET shared by the provider adapters."""

from __future__ import annotations

import json
import logging
import os
import socket
import threading
import time
from dataclasses import dataclass, field
from typing import Any

import requests

DEFAULT_TIMEOUT_MS = 15000
_CHUNK_SIZE = 64 * 1024
_HEADERS = {
    "User-Agent": "ArtworkAggregator/0.1",
    "Accept": "application/json",
}

LOGGER = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised when a single bounded fetch does not produce a response."""


class FetchTimeout(FetchError):
    """The request did not complete before its deadline."""


class FetchNetworkError(FetchError):
    """Connection-level failure (DNS, refused, reset, TLS)."""


@dataclass(frozen=True, slots=True)
class FetchedResponse:
    """Fully read response body. Non-2xx statuses are returned, not raised."""

    url: str
    status_code: int
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.content)


@dataclass(slots=True)
class _StreamedGet:
    """One streamed GET, run on a worker thread so the caller can stop waiting."""

    http: Any
    url: str
    params: dict[str, Any] | None
    timeout_s: float
    response: requests.Response | None = None
    chunks: list[bytes] = field(default_factory=list)
    error: Exception | None = None
    _abandoned: threading.Event = field(default_factory=threading.Event)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def run(self) -> None:
        try:
            response = self.http.get(
                self.url,
                params=self.params,
                headers=_HEADERS,
                timeout=self.timeout_s,
                stream=True,
            )
            with self._lock:
                self.response = response
            if self._abandoned.is_set():
                return
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                if self._abandoned.is_set():
                    return
                self.chunks.append(chunk)
        except Exception as exc:  # re-raised on the calling thread
            self.error = exc
        finally:
            if self.response is not None:
                self.response.close()

    def abort(self) -> None:
        """Stop reading; a recv blocked on the worker wakes up with EOF."""
        self._abandoned.set()
        with self._lock:
            response = self.response
        if response is not None:
            _shutdown_socket(response)


def _shutdown_socket(response: requests.Response) -> None:
    connection = getattr(response.raw, "connection", None)
    sock = getattr(connection, "sock", None)
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as exc:
        LOGGER.debug("GET %s: socket already closed: %s", response.url, exc)


def fetch_with_timeout(
    url: str,
    params: dict[str, Any] | None = None,
    timeout_ms: int | None = None,
    session: requests.Session | None = None,
) -> FetchedResponse:
    """Issue one GET and read the whole body before the deadline expires.

    The request runs on a worker thread and the caller waits at most
    ``timeout_ms`` for it, covering connect, headers and body together. On
    expiry the connection is shut down, which ends the worker's read, and
    FetchTimeout is raised.

    Args:
        url: Resource to fetch.
        params: Optional query-string parameters.
        timeout_ms: Upper bound on the whole call. Defaults to FETCH_TIMEOUT_MS
            (15000 ms).
        session: Optional requests.Session; the module-level requests API is
            used when omitted.

    Raises:
        FetchTimeout: the deadline expired.
        FetchNetworkError: any other transport failure.
        ValueError: timeout_ms is not positive.
    """
    if timeout_ms is None:
        timeout_ms = int(os.getenv("FETCH_TIMEOUT_MS", DEFAULT_TIMEOUT_MS))
    if timeout_ms <= 0:
        raise ValueError(f"timeout_ms must be positive, got {timeout_ms}")

    budget = timeout_ms / 1000
    call = _StreamedGet(
        http=session if session is not None else requests,
        url=url,
        params=params,
        timeout_s=budget,
    )
    started = time.monotonic()
    worker = threading.Thread(target=call.run, name="fetch-with-timeout", daemon=True)
    worker.start()
    worker.join(budget)

    if worker.is_alive():
        call.abort()
        raise FetchTimeout(f"GET {url} exceeded {timeout_ms} ms")

    exc = call.error
    if isinstance(exc, requests.Timeout):
        raise FetchTimeout(f"GET {url} exceeded {timeout_ms} ms") from exc
    if isinstance(exc, requests.RequestException):
        # urllib3 read timeouts surface as ConnectionError while streaming.
        if time.monotonic() - started >= budget:
            raise FetchTimeout(f"GET {url} exceeded {timeout_ms} ms") from exc
        raise FetchNetworkError(f"GET {url} failed: {exc}") from exc
    if exc is not None:
        raise exc

    response = call.response
    LOGGER.debug(
        "GET %s status=%s bytes=%s elapsed_ms=%.0f",
        url,
        response.status_code,
        sum(len(c) for c in call.chunks),
        (time.monotonic() - started) * 1000,
    )
    return FetchedResponse(
        url=response.url or url,
        status_code=response.status_code,
        content=b"".join(call.chunks),
    )
