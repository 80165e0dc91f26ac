"""Building blocks for an OpenAI-compatible LLM gateway: messages, limits, streams and HTTP."""

__version__ = "0.1.0"

__all__ = [
    "files",
    "helpers",
    "limiter",
    "limits",
    "logger",
    "message_utils",
    "messages",
    "model_params",
    "stream_reader",
    "transport",
]