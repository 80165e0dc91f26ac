"""Reading OpenAI-style server-sent event streams of chat completion chunks."""

from __future__ import annotations

import json
from typing import IO, Iterator

from simpleoneapi.messages import OpenAIStreamResponse

_DATA_PREFIX = "data: "


class StreamFormatError(ValueError):
    """The stream held a line that is not a valid event."""


def _text(value: str | bytes) -> str:
    return value.decode("utf-8", errors="replace") if isinstance(value, bytes) else value


class ChatCompletionStream:
    """Reads chat completion chunks from a line-oriented event stream."""

    def __init__(self, reader: IO[bytes] | IO[str]) -> None:
        self._reader = reader

    def recv(self) -> OpenAIStreamResponse | None:
        """Return the next chunk, or None for a blank separator line.

        Raises EOFError when the stream ends or sends ``[DONE]``, and
        StreamFormatError on a malformed line.
        """
        line = _text(self._reader.readline())
        if not line.endswith("\n"):
            raise EOFError("end of stream")
        if line == "\n":
            return None
        if "[DONE]" in line:
            raise EOFError("stream finished")

        data = line.strip()
        if data.startswith(_DATA_PREFIX):
            payload = data[len(_DATA_PREFIX):]
            try:
                raw = json.loads(payload)
            except ValueError as exc:
                raise StreamFormatError(f"invalid stream chunk: {exc}") from exc
            if raw is None:
                return OpenAIStreamResponse()
            if not isinstance(raw, dict):
                raise StreamFormatError(f"invalid stream chunk: {payload}")
            return OpenAIStreamResponse.from_dict(raw)

        rest = _text(self._reader.read())
        raise StreamFormatError(f"unexpected data format: {rest}")

    def __iter__(self) -> Iterator[OpenAIStreamResponse]:
        while True:
            try:
                chunk = self.recv()
            except EOFError:
                return
            if chunk is not None:
                yield chunk