"""HTTP helpers for talking to upstream chat completion services."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator

import requests

logger = logging.getLogger(__name__)

ERROR_BODY_LIMIT = 1024


class HTTPStatusError(Exception):
    """An upstream service answered with an unexpected HTTP status."""

    def __init__(self, message: str, status_code: int, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def _status_line(response: requests.Response) -> str:
    return f"{response.status_code} {response.reason or ''}".rstrip()


def check_status_code(response: requests.Response) -> None:
    """Raise HTTPStatusError unless the response status is 200."""
    if response.status_code == 200:
        return
    try:
        body = response.text
    except requests.RequestException as exc:
        logger.error("Failed to read response body status=%d error=%s", response.status_code, exc)
        raise HTTPStatusError(
            "failed to read error response body", response.status_code
        ) from exc
    logger.error("Unexpected status code status=%d body=%s", response.status_code, body)
    raise HTTPStatusError(f"status {response.status_code}: {body}", response.status_code, body)


def raise_for_error_status(response: requests.Response) -> requests.Response:
    """Return the response, or raise HTTPStatusError with its whole body on 4xx/5xx."""
    if response.status_code < 400:
        return response
    try:
        body = response.text
    except requests.RequestException as exc:
        raise HTTPStatusError(
            f"error reading error response body: {exc}", response.status_code
        ) from exc
    finally:
        response.close()
    raise HTTPStatusError(
        f"HTTP error: {_status_line(response)}, body: {body}", response.status_code, body
    )


def raise_for_error_status_truncated(response: requests.Response) -> requests.Response:
    """Like raise_for_error_status, but reads at most 1024 bytes of the error body."""
    if response.status_code < 400:
        return response
    try:
        chunk = next(response.iter_content(ERROR_BODY_LIMIT), b"")
    except requests.RequestException as exc:
        raise HTTPStatusError(
            f"error reading error response body: {exc}", response.status_code
        ) from exc
    finally:
        response.close()
    body = chunk.decode("utf-8", errors="replace") if isinstance(chunk, bytes) else chunk
    raise HTTPStatusError(
        f"HTTP error: {_status_line(response)}, body: {body}", response.status_code, body
    )


def normalize_sse_lines(lines: Iterable[str]) -> Iterator[str]:
    """Insert the missing space after ``data:`` in event-stream lines."""
    for line in lines:
        if line.startswith("data:") and not line.startswith("data: "):
            line = "data: " + line[len("data:"):]
        yield line


def _post(
    session: requests.Session | None,
    url: str,
    body: bytes,
    headers: dict[str, str],
    stream: bool = False,
) -> requests.Response:
    client = session if session is not None else requests
    return client.post(url, data=body, headers=headers, stream=stream)


def _auth_headers(api_key: str) -> dict[str, str]:
    return {"Content-Type": "application/json", "Authorization": f"Bearer {api_key}"}


def _complete_lines(response: requests.Response) -> Iterator[str]:
    """Yield newline-terminated lines; a trailing unterminated line is dropped."""
    pending = b""
    for chunk in response.iter_content(chunk_size=8192):
        pending += chunk
        while b"\n" in pending:
            line, pending = pending.split(b"\n", 1)
            yield (line + b"\n").decode("utf-8", errors="replace")


def _dispatch_events(response: requests.Response, callback: Callable[[str], None]) -> None:
    for line in _complete_lines(response):
        logger.debug("send_sse_request line=%r", line)
        if line.startswith("data:"):
            callback(line[len("data:"):].strip())


def send_http_request(
    api_key: str, url: str, body: bytes, session: requests.Session | None = None
) -> bytes:
    """POST a JSON body with a bearer key and return the response body."""
    with _post(session, url, body, _auth_headers(api_key)) as response:
        content = response.content
        if response.status_code != 200:
            text = content.decode("utf-8", errors="replace")
            raise HTTPStatusError(
                f"http status code: {response.status_code}, {text}", response.status_code, text
            )
        return content


def send_sse_request(
    api_key: str,
    url: str,
    body: bytes,
    callback: Callable[[str], None],
    session: requests.Session | None = None,
) -> None:
    """POST a JSON body and call ``callback`` with the payload of every ``data:`` line."""
    logger.debug("send_sse_request url=%s", url)
    headers = _auth_headers(api_key)
    headers["Accept"] = "text/event-stream"
    with _post(session, url, body, headers, stream=True) as response:
        if response.status_code != 200:
            try:
                text = response.text
            except requests.RequestException as exc:
                logger.error("%s", exc)
                text = ""
            message = text or "empty response body"
            raise HTTPStatusError(
                f"http status code: {response.status_code}, {message}",
                response.status_code,
                text,
            )
        _dispatch_events(response, callback)


def send_sse_request_with_headers(
    api_key: str,
    url: str,
    body: bytes,
    callback: Callable[[str], None],
    session: requests.Session | None = None,
    headers: dict[str, str] | None = None,
) -> None:
    """Like send_sse_request with extra headers, and without a status check."""
    logger.debug("send_sse_request url=%s", url)
    request_headers = _auth_headers(api_key)
    request_headers.update(headers or {})
    with _post(session, url, body, request_headers, stream=True) as response:
        _dispatch_events(response, callback)