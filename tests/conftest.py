from __future__ import annotations

import threading
import time
from typing import Any, Callable, Iterator, Optional

import pytest


class FakeResponse:
    def __init__(
        self,
        *,
        status_code: int = 200,
        body: bytes = b"1",
        reason: str = "OK",
        read_error: Optional[Exception] = None,
        chunk_delay: float = 0.0,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.encoding = "utf-8"
        self._body = body
        self._read_error = read_error
        self._chunk_delay = chunk_delay
        self.close_calls = 0
        self.closed = threading.Event()

    def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
        if self._read_error is not None:
            raise self._read_error
        # A slow body arrives one byte at a time.
        step = 1 if self._chunk_delay else chunk_size
        for i in range(0, len(self._body), step):
            if self._chunk_delay:
                time.sleep(self._chunk_delay)
            yield self._body[i : i + step]

    def close(self) -> None:
        self.close_calls += 1
        self.closed.set()


class FakeSession:
    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None) -> None:
        self.response = response or FakeResponse()
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_session() -> Callable[..., FakeSession]:
    def _make(
        *,
        status_code: int = 200,
        body: bytes = b"1",
        reason: str = "OK",
        read_error: Optional[Exception] = None,
        chunk_delay: float = 0.0,
        error: Optional[Exception] = None,
    ) -> FakeSession:
        response = FakeResponse(
            status_code=status_code,
            body=body,
            reason=reason,
            read_error=read_error,
            chunk_delay=chunk_delay,
        )
        return FakeSession(response, error=error)

    return _make
