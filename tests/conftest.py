"""Shared fixtures: in-memory zip archives and a fake HTTP session."""

from __future__ import annotations

import io
import threading
import zipfile
from typing import Dict, Iterable, List, Tuple, Union

import pytest
import requests


def build_zip(members: Iterable[Tuple[str, bytes]], compression: int = zipfile.ZIP_DEFLATED) -> bytes:
    """Zip bytes with members in the given order; names ending in '/' become directories."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=compression) as archive:
        for name, data in members:
            if name.endswith("/"):
                archive.writestr(zipfile.ZipInfo(name), b"")
            else:
                archive.writestr(name, data)
    return buffer.getvalue()


class FakeResponse:
    def __init__(self, status_code: int = 200, body: bytes = b"", fail_after_first_chunk: bool = False):
        self.status_code = status_code
        self.content = body
        self._body = body
        self._fail = fail_after_first_chunk
        self.closed = False

    def iter_content(self, chunk_size: int = 1):
        for offset in range(0, len(self._body), chunk_size):
            yield self._body[offset:offset + chunk_size]
            if self._fail:
                raise requests.ConnectionError("connection reset")

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


Route = Union[FakeResponse, Exception]


class FakeSession:
    """Stand-in for requests.Session serving canned responses per URL."""

    def __init__(self, routes: Dict[str, Route]):
        self.routes = routes
        self.headers: Dict[str, str] = {}
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def get(self, url: str, timeout=None, stream: bool = False):
        with self._lock:
            self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(status_code=404)
        if isinstance(route, Exception):
            raise route
        return FakeResponse(route.status_code, route._body, route._fail)


@pytest.fixture
def make_zip():
    return build_zip


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse
