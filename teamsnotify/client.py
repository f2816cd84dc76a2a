from __future__ import annotations

import logging
import re
import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Iterable, Optional, Pattern
from urllib.parse import urlsplit

import requests

from teamsnotify.errors import (
    EndpointError,
    InvalidDestination,
    InvalidMessage,
    MalformedURL,
    SendTimeout,
    SerializationError,
    SerializationFailed,
    TransportFailure,
    URLPatternMismatch,
    UnexpectedResponseBody,
    ValidationError,
)
from teamsnotify.message import TeamsMessage


log = logging.getLogger("teamsnotify.client")

# Matched against "scheme://netloc" of the webhook URL.
WEBHOOK_URL_VALID_PATTERN = re.compile(r"^https://(?:[^/?#@:]+\.webhook|outlook)\.office(?:365)?\.com$", re.IGNORECASE)

DEFAULT_URL_PATTERNS: tuple[Pattern[str], ...] = (WEBHOOK_URL_VALID_PATTERN,)

# Observed endpoint behaviour, not a documented contract.
EXPECTED_ENDPOINT_RESPONSE_TEXT = "1"

WEBHOOK_SEND_TIMEOUT = 5.0

READ_CHUNK_SIZE = 64

DEFAULT_HEADERS = {
    "Content-Type": "application/json;charset=utf-8",
}


class TeamsClient:
    """Posts messages to a Microsoft Teams incoming webhook.

    The session is reused across calls and may be shared between threads; the client
    keeps no per-call state. Each send runs its request on a short-lived worker thread
    and the timeout bounds the whole exchange, headers and body included.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        timeout: float = WEBHOOK_SEND_TIMEOUT,
        url_patterns: Optional[Iterable[Pattern[str]]] = None,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = float(timeout)
        self._url_patterns = tuple(url_patterns) if url_patterns is not None else DEFAULT_URL_PATTERNS

    @property
    def session(self) -> requests.Session:
        return self._session

    @property
    def timeout(self) -> float:
        return self._timeout

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "TeamsClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def validate_webhook(self, webhook_url: str) -> None:
        try:
            parsed = urlsplit(webhook_url)
            parsed.port  # raises ValueError on a bad port
        except (TypeError, ValueError) as e:
            raise MalformedURL(f"could not parse webhook URL {webhook_url!r}: {e}") from e
        if not parsed.scheme or not parsed.netloc:
            raise MalformedURL(f"could not parse webhook URL {webhook_url!r}: missing scheme or host")

        origin = f"{parsed.scheme}://{parsed.netloc}"
        for pattern in self._url_patterns:
            if pattern.match(origin):
                return
        raise URLPatternMismatch(f"the webhook URL does not match the expected pattern; got: {webhook_url!r}")

    def send(self, webhook_url: str, message: TeamsMessage) -> None:
        """Validate, serialize and post ``message``; raise a ``SendError`` subclass on failure."""
        deadline = time.monotonic() + self._timeout

        try:
            self.validate_webhook(webhook_url)
        except ValidationError as e:
            raise InvalidDestination(f"webhook URL validation failed: {e}") from e

        try:
            message.validate()
        except ValidationError as e:
            raise InvalidMessage(f"failed to validate message: {e}") from e

        try:
            body = message.serialize()
        except SerializationError as e:
            raise SerializationFailed(f"failed to prepare message: {e}") from e

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise SendTimeout(f"failed to send message: timed out after {self._timeout:g}s")

        log.debug("Posting %d bytes to webhook", len(body))
        aborted = threading.Event()
        future: Future[tuple[int, str, str]] = Future()

        def run() -> None:
            try:
                future.set_result(self._exchange(webhook_url, body, deadline, aborted))
            except Exception as e:
                future.set_exception(e)

        threading.Thread(target=run, name="teamsnotify-send", daemon=True).start()

        try:
            status_code, reason, response_text = future.result(timeout=remaining)
        except FutureTimeoutError as e:
            # The worker releases the response as soon as it sees the abort.
            aborted.set()
            raise SendTimeout(f"failed to send message: timed out after {self._timeout:g}s") from e
        except requests.Timeout as e:
            raise SendTimeout(f"failed to send message: timed out after {self._timeout:g}s") from e
        except requests.RequestException as e:
            # requests reports a body read timeout as ConnectionError.
            if time.monotonic() >= deadline:
                raise SendTimeout(f"failed to send message: timed out after {self._timeout:g}s") from e
            raise TransportFailure(f"failed to send message: {e}") from e

        _check_response(status_code, reason, response_text)
        log.info("Response string: %s", response_text)

    def _exchange(self, webhook_url: str, body: bytes, deadline: float, aborted: threading.Event) -> tuple[int, str, str]:
        response = self._session.post(
            webhook_url,
            data=body,
            headers=DEFAULT_HEADERS,
            timeout=max(deadline - time.monotonic(), 0.001),
            stream=True,
        )
        try:
            if aborted.is_set():
                raise SendTimeout("response arrived after the deadline")
            response_text = _read_body(response, aborted)
            return response.status_code, str(response.reason or ""), response_text
        finally:
            response.close()


def _read_body(response: requests.Response, aborted: threading.Event) -> str:
    chunks: list[bytes] = []
    # Small reads so an aborted send stops between pieces of a slow body.
    for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
        if aborted.is_set():
            raise SendTimeout("response body still arriving after the deadline")
        if chunk:
            chunks.append(chunk)
    return b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")


def _check_response(status_code: int, reason: str, response_text: str) -> None:
    if status_code >= 299:
        raise EndpointError(status_code, reason, response_text)
    if response_text.strip() != EXPECTED_ENDPOINT_RESPONSE_TEXT:
        raise UnexpectedResponseBody(response_text, EXPECTED_ENDPOINT_RESPONSE_TEXT)
