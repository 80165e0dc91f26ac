# simpleoneapi

A library of building blocks for a gateway that speaks the OpenAI chat
completions protocol and forwards requests to upstream model providers.
It covers the pieces such a gateway needs on every request:

- **Chat data model** (`simpleoneapi.messages`): dataclasses for requests
  (`ChatCompletionRequest`, `OpenAIRequest`), messages with multi-part
  content (`ChatCompletionMessage`, `ChatMessagePart`, `ImageURL`),
  responses (`OpenAIResponse`) and streaming chunks (`OpenAIStreamResponse`),
  with `to_dict()` / `from_dict()` for JSON round trips. Empty optional
  fields are left out of the dictionaries.
- **Message handling** (`simpleoneapi.message_utils`): pull out the system or
  latest message, fold a leading system message into the next turn,
  normalise a conversation so user and assistant turns alternate, read inline
  (`data:`) or remote (`http...`) image data as base64, parse loosely formed
  request bodies, and log requests with inline image data redacted.
- **Model parameter limits** (`simpleoneapi.model_params`): clamp
  temperature, top-p and max tokens to the range a known model accepts
  (the `glm-*` family); unknown models raise `UnsupportedModelError`.
- **Rate limits** (`simpleoneapi.limits`, `simpleoneapi.limiter`): read limit
  settings from a credentials mapping or a `Limit` record, and apply them
  with a token bucket (per second), a sliding window (per minute) or a
  concurrency cap, shared per key.
- **Upstream HTTP** (`simpleoneapi.transport`): plain JSON POST and
  server-sent-event requests with bearer authentication, error status
  handling (`HTTPStatusError`), and repair of `data:` lines that lack the
  space after the colon.
- **Stream reading** (`simpleoneapi.stream_reader`): turn an SSE body into
  `OpenAIStreamResponse` chunks, stopping at `[DONE]`.
- **Small helpers** (`simpleoneapi.helpers`, `simpleoneapi.files`,
  `simpleoneapi.logger`): bearer token extraction, SSE headers and the
  closing `[DONE]` frame, RFC 3339 timestamps, path utilities and logging
  set-up.

## Installation

```
pip install simpleoneapi
```

Python 3.10 or later is required. The only runtime dependency is `requests`.

## Examples

### Preparing a conversation

```python
from simpleoneapi.messages import ChatCompletionMessage
from simpleoneapi.message_utils import (
    convert_system_messages_to_no_system,
    get_system_message,
    normalize_messages,
)

messages = [
    ChatCompletionMessage(role="system", content="Answer briefly."),
    ChatCompletionMessage(role="user", content="Hello"),
    ChatCompletionMessage(role="user", content="Are you there?"),
]

get_system_message(messages)                    # "Answer briefly."
normalize_messages(messages, False)             # the second user turn is dropped
convert_system_messages_to_no_system(messages)  # "Answer briefly.\nHello" as the first turn
```

Both reshaping functions return new lists and leave the input untouched.

### Parsing a request body

```python
from simpleoneapi.message_utils import parse_chat_completion_request

request = parse_chat_completion_request(
    b'{"model": "glm-4", "stream": true,'
    b' "messages": [{"role": "user", "content": {"type": "text", "text": "Hi"}}]}'
)
request.messages[0].content   # "Hi"
```

Malformed bodies raise `ValueError`.

### Clamping model parameters

```python
from simpleoneapi.model_params import UnsupportedModelError, adjust_params_to_range

temperature, top_p, max_tokens = adjust_params_to_range("glm-4", 1.5, 0.5, 10000)
# temperature becomes 0.99, max_tokens is capped at 4095

try:
    adjust_params_to_range("unknown-model", 0.7, 0.9, 512)
except UnsupportedModelError:
    ...
```

`message_utils.adjust_request_params(request)` applies the same clamping to
a `ChatCompletionRequest` in place and does nothing for unknown models.

### Rate limiting

```python
from simpleoneapi.limits import Limit, get_limit_details
from simpleoneapi.limiter import LimiterTimeout, get_limiter

details = get_limit_details(Limit(concurrency=4))
limiter = get_limiter("my-service", details.limit_type, details.value)

try:
    limiter.wait(timeout=5)      # waits for a per-second or per-minute slot
    limiter.acquire(timeout=5)   # takes a concurrency slot
except LimiterTimeout:
    ...
else:
    try:
        ...                      # call the upstream model
    finally:
        limiter.release()
```

`get_limiter` returns the same limiter for the same key, so all requests for
one service share its budget. An unknown limit type gives a limiter that
never waits.

### Calling an upstream provider

```python
import requests
from simpleoneapi.transport import HTTPStatusError, send_http_request, send_sse_request

with requests.Session() as session:
    body = b'{"model": "glm-4", "messages": [{"role": "user", "content": "Hi"}]}'
    try:
        raw = send_http_request("placeholder", "https://api.example.com/v1/chat/completions",
                                body, session)
    except HTTPStatusError as exc:
        print(exc.status_code, exc.body)

    send_sse_request("placeholder", "https://api.example.com/v1/chat/completions",
                     body, print, session)
```

### Reading a stream

```python
import io
from simpleoneapi.stream_reader import ChatCompletionStream

body = io.BytesIO(
    b'data: {"choices": [{"index": 0, "delta": {"content": "Hel"}}]}\n\n'
    b'data: {"choices": [{"index": 0, "delta": {"content": "lo"}}]}\n\n'
    b"data: [DONE]\n\n"
)
"".join(chunk.choices[0].delta.content for chunk in ChatCompletionStream(body))  # "Hello"
```

`recv()` returns one chunk at a time, `None` for a blank line, raises
`EOFError` at the end of the stream and `StreamFormatError` on a malformed
line.

### Helpers

```python
from simpleoneapi.helpers import get_api_key_from_header, parse_rfc3339nano_to_unix_time
from simpleoneapi.logger import init_log

get_api_key_from_header("Bearer token")                    # "token"
parse_rfc3339nano_to_unix_time("2024-01-01T00:00:00Z")     # 1704067200

init_log("debug")   # "prod", "dev", "debug"; "prodjson" writes JSON lines
```

## What this package does not do

It is a library, not a running gateway. It has no HTTP server, no
configuration file loading, no adapters for particular model providers and
no command-line program. It does not route a request to a model or choose
between credentials; the pieces above are meant to be used by code that
does.

## Running the tests

```
pip install "simpleoneapi[test]"
pytest
```