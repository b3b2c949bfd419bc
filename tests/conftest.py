from __future__ import annotations

from typing import Callable, Optional

import pytest
import requests


class FakeClock:
    """実時間を使わずにレート制限を検証するための時計。sleep すると時刻が進む。"""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


class DummyResponse:
    def __init__(
        self,
        url: str,
        body: bytes = b"",
        status_code: int = 200,
        chunks: Optional[list] = None,
    ) -> None:
        self.url = url
        self.status_code = status_code
        self.headers = {"Content-Type": "text/html"}
        self._chunks = chunks if chunks is not None else [body]
        self.closed = False

    def iter_content(self, chunk_size: int = 1):
        for chunk in self._chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk

    def close(self) -> None:
        self.closed = True


class DummySession:
    """
    requests.Session の代わり。URL ごとに返す本文または送出する例外を登録できる。
    on_get を渡すと get 呼び出し時に任意の処理（時計を進める等）を行う。
    """

    def __init__(self, pages: Optional[dict] = None, on_get: Optional[Callable[[str], None]] = None) -> None:
        self.pages = pages or {}
        self.on_get = on_get
        self.calls: list[dict] = []
        self.responses: list[DummyResponse] = []
        self.closed = False

    def get(self, url, headers=None, timeout=None, stream=False):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout, "stream": stream})
        if self.on_get is not None:
            self.on_get(url)

        page = self.pages.get(url, b"<html><head><title>ok</title></head></html>")
        if isinstance(page, Exception):
            raise page
        if isinstance(page, DummyResponse):
            response = page
        else:
            response = DummyResponse(url, page)
        self.responses.append(response)
        return response

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session() -> DummySession:
    return DummySession()


@pytest.fixture
def unreachable() -> Exception:
    return requests.ConnectionError("Failed to resolve 'unreachable.invalid'")
