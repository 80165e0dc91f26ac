"""Chat message, request and response shapes of the OpenAI-compatible wire format."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Callable

ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_TOOL = "tool"

PART_TYPE_TEXT = "text"
PART_TYPE_IMAGE_URL = "image_url"


def _omit_empty(**kwargs: Any) -> Any:
    """A field left out of the JSON form when it is empty."""
    return field(metadata={"omit": "empty"}, **kwargs)


def _omit_none(default: Any = None) -> Any:
    """A field left out of the JSON form when it is None."""
    return field(default=default, metadata={"omit": "none"})


def _encode(value: Any) -> Any:
    if isinstance(value, _Wire):
        return value.to_dict()
    if isinstance(value, list):
        return [_encode(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _encode(item) for key, item in value.items()}
    return value


def _one(cls: type) -> Callable[[Any], Any]:
    return cls.from_dict


def _list_of(cls: type) -> Callable[[Any], Any]:
    return lambda items: [cls.from_dict(item) for item in items]


def _int_keys(data: dict[str, Any]) -> dict[int, Any]:
    return {int(key): value for key, value in data.items()}


class _Wire:
    """JSON mapping driven by the dataclass fields; keys equal field names."""

    # Field name -> decoder for fields holding nested wire objects.
    _nested: dict[str, Callable[[Any], Any]] = {}

    def _wire_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            omit = f.metadata.get("omit")
            if (omit == "empty" and not value) or (omit == "none" and value is None):
                continue
            data[f.name] = _encode(value)
        return data

    @classmethod
    def _from_wire(cls, data: dict[str, Any]) -> Any:
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            value = data.get(f.name)
            if value is None:
                continue
            decode = cls._nested.get(f.name)
            kwargs[f.name] = decode(value) if decode else value
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return self._wire_dict()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Any:
        return cls._from_wire(data)


@dataclass
class Message(_Wire):
    """A plain role/content message."""

    role: str = ""
    content: str = ""


@dataclass
class ImageURL(_Wire):
    """Image reference inside a multi-part message."""

    url: str = ""
    detail: str = _omit_empty(default="")


@dataclass
class ChatMessagePart(_Wire):
    """One part of a multi-part message: text or an image."""

    type: str = ""
    text: str = _omit_empty(default="")
    image_url: ImageURL | None = _omit_none()

    _nested = {"image_url": _one(ImageURL)}

    def to_dict(self) -> dict[str, Any]:
        return self._wire_dict()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatMessagePart:
        return cls._from_wire(data)


@dataclass
class ChatCompletionMessage(_Wire):
    """A chat message whose content is either a string or a list of parts."""

    role: str = ""
    content: str = ""
    multi_content: list[ChatMessagePart] = field(default_factory=list)
    name: str = ""
    tool_call_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        if self.content and self.multi_content:
            raise ValueError("content and multi_content cannot both be set")
        data: dict[str, Any] = {"role": self.role}
        if self.multi_content:
            data["content"] = [part.to_dict() for part in self.multi_content]
        elif self.content:
            data["content"] = self.content
        for key in ("name", "tool_call_id"):
            if getattr(self, key):
                data[key] = getattr(self, key)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatCompletionMessage:
        raw = data.get("content")
        content, parts = "", []
        if isinstance(raw, list):
            parts = [ChatMessagePart.from_dict(part) for part in raw]
        elif isinstance(raw, str):
            content = raw
        elif raw is not None:
            raise ValueError(f"unsupported message content: {raw!r}")
        return cls(
            role=data.get("role", ""),
            content=content,
            multi_content=parts,
            name=data.get("name", ""),
            tool_call_id=data.get("tool_call_id", ""),
        )


@dataclass
class ChatCompletionRequest(_Wire):
    """A chat completion request as sent by clients."""

    model: str = ""
    messages: list[ChatCompletionMessage] = field(default_factory=list)
    max_tokens: int = _omit_empty(default=0)
    temperature: float = _omit_empty(default=0.0)
    top_p: float = _omit_empty(default=0.0)
    n: int = _omit_empty(default=0)
    stream: bool = _omit_empty(default=False)
    stop: list[str] = _omit_empty(default_factory=list)
    presence_penalty: float = _omit_empty(default=0.0)
    frequency_penalty: float = _omit_empty(default=0.0)
    user: str = _omit_empty(default="")

    _nested = {"messages": _list_of(ChatCompletionMessage)}

    def to_dict(self) -> dict[str, Any]:
        return self._wire_dict()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatCompletionRequest:
        return cls._from_wire(data)


@dataclass
class ResponseFormat(_Wire):
    """Requested response format."""

    type: str = ""


@dataclass
class StreamOptions(_Wire):
    """Streaming options; carries no fields."""


@dataclass
class Function(_Wire):
    """A named function a tool refers to."""

    name: str = ""


@dataclass
class Tool(_Wire):
    """A tool offered to the model."""

    type: str = ""
    function: Function | None = _omit_none()

    _nested = {"function": _one(Function)}


@dataclass
class ToolChoiceFunction(Tool):
    """An explicit tool choice naming a function."""


@dataclass
class OpenAIRequest(_Wire):
    """Request body with every optional field left out when unset."""

    model: str = ""
    messages: list[Message] = field(default_factory=list)
    frequency_penalty: float | None = _omit_none()
    logit_bias: dict[int, int] | None = _omit_empty(default=None)
    logprobs: bool | None = _omit_none()
    top_logprobs: int | None = _omit_none()
    max_tokens: int | None = _omit_none()
    n: int | None = _omit_none()
    presence_penalty: float | None = _omit_none()
    response_format: ResponseFormat | None = _omit_none()
    seed: int | None = _omit_none()
    stop: list[str] = _omit_empty(default_factory=list)
    stream: bool | None = _omit_none()
    stream_options: StreamOptions | None = _omit_none()
    temperature: float | None = _omit_none()
    top_p: float | None = _omit_none()
    tools: list[Tool] = _omit_empty(default_factory=list)
    tool_choice: Any = _omit_none()
    user: str | None = _omit_none()

    _nested = {
        "messages": _list_of(Message),
        "logit_bias": _int_keys,
        "response_format": _one(ResponseFormat),
        "stream_options": _one(StreamOptions),
        "tools": _list_of(Tool),
    }

    def to_dict(self) -> dict[str, Any]:
        return self._wire_dict()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OpenAIRequest:
        return cls._from_wire(data)


@dataclass
class FunctionCall(_Wire):
    """A function call made by the model."""

    name: str = _omit_empty(default="")
    arguments: str = _omit_empty(default="")


@dataclass
class ToolCall(_Wire):
    """A tool call made by the model."""

    index: int | None = _omit_none()
    id: str = ""
    type: str = ""
    function: FunctionCall = field(default_factory=FunctionCall)

    _nested = {"function": _one(FunctionCall)}


@dataclass
class ResponseMessage(_Wire):
    """The message of a complete response choice."""

    role: str = ""
    content: str = ""
    tool_calls: list[ToolCall] = _omit_empty(default_factory=list)
    tool_call_id: str = _omit_empty(default="")

    _nested = {"tool_calls": _list_of(ToolCall)}


@dataclass
class ResponseDelta(_Wire):
    """The incremental message of a streamed choice."""

    role: str = ""
    content: str = ""
    tool_calls: list[ToolCall] = _omit_empty(default_factory=list)

    _nested = {"tool_calls": _list_of(ToolCall)}


@dataclass
class Usage(_Wire):
    """Token usage statistics."""

    prompt_tokens: int = _omit_empty(default=0)
    completion_tokens: int = _omit_empty(default=0)
    total_tokens: int = _omit_empty(default=0)


@dataclass
class ErrorDetail(_Wire):
    """Error details returned in place of a result."""

    message: str = _omit_empty(default="")
    type: str = _omit_empty(default="")
    param: Any = _omit_none()
    code: Any = _omit_none()


@dataclass
class Choice(_Wire):
    """One choice of a complete response."""

    index: int = 0
    message: ResponseMessage = field(default_factory=ResponseMessage)
    logprobs: Any = None
    finish_reason: str = ""

    _nested = {"message": _one(ResponseMessage)}


@dataclass
class OpenAIResponse(_Wire):
    """A complete, non-streamed chat completion response."""

    id: str = ""
    object: str = _omit_empty(default="")
    created: int = _omit_empty(default=0)
    model: str = _omit_empty(default="")
    system_fingerprint: str = _omit_empty(default="")
    choices: list[Choice] = _omit_empty(default_factory=list)
    usage: Usage | None = _omit_none()
    error: ErrorDetail | None = _omit_none()

    _nested = {
        "choices": _list_of(Choice),
        "usage": _one(Usage),
        "error": _one(ErrorDetail),
    }

    def to_dict(self) -> dict[str, Any]:
        return self._wire_dict()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OpenAIResponse:
        return cls._from_wire(data)


@dataclass
class OpenAIStreamResponseChoice(_Wire):
    """One choice of a streamed response chunk."""

    index: int = 0
    delta: ResponseDelta = field(default_factory=ResponseDelta)
    logprobs: Any = _omit_none()
    finish_reason: Any = _omit_none()

    _nested = {"delta": _one(ResponseDelta)}


@dataclass
class OpenAIStreamResponse(_Wire):
    """A streamed chat completion chunk."""

    id: str = _omit_empty(default="")
    object: str = _omit_empty(default="")
    created: int = _omit_empty(default=0)
    model: str = _omit_empty(default="")
    system_fingerprint: str = _omit_empty(default="")
    choices: list[OpenAIStreamResponseChoice] = _omit_empty(default_factory=list)
    usage: Usage | None = _omit_none()
    error: ErrorDetail | None = _omit_none()

    _nested = {
        "choices": _list_of(OpenAIStreamResponseChoice),
        "usage": _one(Usage),
        "error": _one(ErrorDetail),
    }

    def to_dict(self) -> dict[str, Any]:
        return self._wire_dict()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OpenAIStreamResponse:
        return cls._from_wire(data)