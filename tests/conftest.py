"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import requests


class FakeResponse:
    """Just enough of :class:`requests.Response` for the client."""

    def __init__(self, status_code: int = 200, body: bytes = b"", payload: Any = None) -> None:
        self.status_code = status_code
        self._body = json.dumps(payload).encode() if payload is not None else body

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        return json.loads(self._body)

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error")

    def iter_content(self, chunk_size: int = 1):
        for i in range(0, len(self._body), chunk_size):
            yield self._body[i:i + chunk_size]

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        return None


class FakeSession:
    """Records calls and replays queued responses (or raises queued exceptions)."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.posts: list[FakeResponse | Exception] = []
        self.gets: dict[str, FakeResponse | Exception] = {}

    def queue_shrink(self, payload: Any = None, status_code: int = 200, error: Exception | None = None) -> None:
        self.posts.append(error if error is not None else FakeResponse(status_code, payload=payload))

    def serve(self, url: str, body: bytes = b"", status_code: int = 200, error: Exception | None = None) -> None:
        self.gets[url] = error if error is not None else FakeResponse(status_code, body=body)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(("POST", url, kwargs))
        item = self.posts.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(("GET", url, kwargs))
        item = self.gets[url]
        if isinstance(item, Exception):
            raise item
        return item


def shrink_payload(ratio: float, url: str = "https://tinypng.com/web/output/abc", input_size: int = 4096) -> dict:
    """A successful shrink response body as the service returns it."""
    output_size = int(input_size * ratio)
    return {
        "input": {"size": input_size, "type": "image/png"},
        "output": {
            "size": output_size,
            "type": "image/png",
            "width": 81,
            "height": 81,
            "ratio": ratio,
            "url": url,
        },
    }


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def make_file(tmp_path):
    """Create a file under tmp_path with the given size or content."""

    def _make(rel: str, size: int = 0, content: bytes | None = None) -> Path:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content if content is not None else b"\x89" * size)
        return path

    return _make


@pytest.fixture(autouse=True)
def isolate_config(tmp_path, monkeypatch):
    """Point XDG_CONFIG_HOME at a temp directory so no real settings leak in."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home
