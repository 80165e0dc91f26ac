"""Helpers that inspect, reshape, parse and log chat completion messages."""

from __future__ import annotations

import base64
import copy
import dataclasses
import json
import logging
from typing import Any

import requests

from simpleoneapi.messages import (
    PART_TYPE_IMAGE_URL,
    PART_TYPE_TEXT,
    ROLE_SYSTEM,
    ChatCompletionMessage,
    ChatCompletionRequest,
    ChatMessagePart,
)
from simpleoneapi.model_params import UnsupportedModelError, adjust_params_to_range

logger = logging.getLogger(__name__)

IMAGE_FETCH_TIMEOUT = 30.0
REDACTED_URL = "..."

_ALTERNATING_ROLES = frozenset({"user", "assistant", "model"})


class ImageDataError(ValueError):
    """An image reference could not be turned into base64 data."""


def _first_text(message: ChatCompletionMessage) -> str | None:
    """Return the message's text: its first text part, or its plain content."""
    if message.multi_content:
        return next(
            (part.text for part in message.multi_content if part.type == PART_TYPE_TEXT),
            None,
        )
    return message.content


def get_system_message(messages: list[ChatCompletionMessage]) -> str:
    """Return the text of the first system message, or an empty string."""
    for message in messages:
        if message.role == ROLE_SYSTEM:
            text = _first_text(message)
            if text is not None:
                return text
    return ""


def get_latest_message(messages: list[ChatCompletionMessage]) -> str:
    """Return the text of the last message unless it is a system message."""
    if not messages:
        return ""
    latest = messages[-1]
    if latest.role == ROLE_SYSTEM:
        return ""
    return _first_text(latest) or ""


def is_multi_content_message(messages: list[ChatCompletionMessage]) -> bool:
    """Tell whether any message carries multi-part content."""
    return any(message.multi_content for message in messages)


def convert_system_messages_to_no_system(
    messages: list[ChatCompletionMessage],
) -> list[ChatCompletionMessage]:
    """Fold a leading system message into the next one.

    A lone system message becomes a user message; otherwise its content is
    prefixed, followed by a newline, to the message after it.
    """
    result = [dataclasses.replace(message) for message in messages]
    if result and result[0].role.lower() == ROLE_SYSTEM:
        if len(result) == 1:
            result[0].role = "user"
        else:
            system_query = result[0].content
            result = result[1:]
            result[0].content = f"{system_query}\n{result[0].content}"
    logger.debug("convert_system_messages_to_no_system: %s", result)
    return result


def normalize_messages(
    messages: list[ChatCompletionMessage], keep_all_system: bool
) -> list[ChatCompletionMessage]:
    """Make the history acceptable to strict back ends.

    Later system messages are dropped unless ``keep_all_system`` is set, empty
    messages get a single space, and of consecutive user/assistant/model
    messages with the same role only the first is kept.
    """
    if not messages:
        return []
    source = [dataclasses.replace(message) for message in messages]
    if source[0].role.lower() == ROLE_SYSTEM and len(source) == 1:
        source[0].role = "user"

    normalized: list[ChatCompletionMessage] = []
    last_role = ""
    for position, message in enumerate(source):
        role = message.role.lower()
        if not keep_all_system and role == ROLE_SYSTEM and position > 0:
            continue
        if not message.content and not message.multi_content:
            message.content = " "
        if role in _ALTERNATING_ROLES and role == last_role:
            continue
        normalized.append(message)
        last_role = role
    return normalized


def get_image_url_data(data_str: str) -> tuple[str, str]:
    """Return ``(base64_data, mime_type)`` for a data URL or an HTTP image URL."""
    if data_str.startswith("data:"):
        separator = data_str.find(",")
        if separator == -1:
            raise ImageDataError("invalid data URL format")
        return data_str[separator + 1:], data_str[5:separator]

    if data_str.startswith("http"):
        try:
            response = requests.get(data_str, timeout=IMAGE_FETCH_TIMEOUT)
        except requests.RequestException as exc:
            raise ImageDataError(f"error fetching image: {exc}") from exc
        with response:
            if response.status_code != 200:
                raise ImageDataError(
                    f"failed to download image: HTTP status {response.status_code}"
                )
            encoded = base64.b64encode(response.content).decode("ascii")
            return encoded, response.headers.get("Content-Type", "")

    raise ImageDataError("unsupported URL format")


def adjust_request_params(request: ChatCompletionRequest) -> None:
    """Clamp the request's sampling parameters in place for known models."""
    try:
        temperature, top_p, max_tokens = adjust_params_to_range(
            request.model, request.temperature, request.top_p, request.max_tokens
        )
    except UnsupportedModelError:
        return
    request.temperature = temperature
    request.top_p = top_p
    request.max_tokens = max_tokens
    logger.debug(
        "adjustedTemperature=%s adjustedTopP=%s MaxTokens=%s", temperature, top_p, max_tokens
    )


def deep_copy_request(request: ChatCompletionRequest) -> ChatCompletionRequest:
    """Return a copy of the request that shares no mutable state with it."""
    return copy.deepcopy(request)


def redact_request(request: ChatCompletionRequest) -> ChatCompletionRequest:
    """Return a copy with inline (non-HTTP) image data replaced by a placeholder."""
    redacted = deep_copy_request(request)
    for message in redacted.messages:
        for part in message.multi_content:
            if (
                part.type == PART_TYPE_IMAGE_URL
                and part.image_url is not None
                and not part.image_url.url.startswith("http")
            ):
                part.image_url.url = REDACTED_URL
    return redacted


def log_chat_completion_request(request: ChatCompletionRequest) -> str | None:
    """Log the request with inline images redacted; return the logged JSON."""
    logger.debug("log_chat_completion_request: %s", request)
    redacted = redact_request(request)
    logger.debug("log_chat_completion_request filtered: %s", redacted)
    try:
        text = json.dumps(redacted.to_dict(), ensure_ascii=False)
    except (TypeError, ValueError):
        logger.exception("log_chat_completion_request: cannot serialise request")
        return None
    logger.info("log_chat_completion_request: %s", text)
    return text


def _typed(obj: dict[str, Any], key: str, kinds: tuple[type, ...], default: Any) -> Any:
    value = obj.get(key)
    if value is None:
        return default
    if isinstance(value, bool) and bool not in kinds:
        raise ValueError(f"invalid value for {key!r}: {value!r}")
    if not isinstance(value, kinds):
        raise ValueError(f"invalid value for {key!r}: {value!r}")
    return value


def _parse_content(raw: Any) -> str:
    if raw is None or isinstance(raw, str):
        return raw or ""
    if isinstance(raw, dict):
        part_type = raw.get("type")
        text = raw.get("text")
        if not all(value is None or isinstance(value, str) for value in (part_type, text)):
            raise ValueError("failed to unmarshal content")
        if part_type == PART_TYPE_TEXT:
            return text or ""
        raise ValueError(f"unexpected content type: {part_type or ''}")
    if isinstance(raw, list):
        parts = []
        for item in raw:
            if item is None:
                item = {}
            if not isinstance(item, dict):
                raise ValueError("failed to unmarshal content")
            parts.append(ChatMessagePart.from_dict(item))
        return json.dumps(
            [part.to_dict() for part in parts], separators=(",", ":"), ensure_ascii=False
        )
    raise ValueError("failed to unmarshal content")


def parse_chat_completion_request(data: str | bytes) -> ChatCompletionRequest:
    """Parse a request body, flattening every message's content to a string.

    Text-part objects contribute their text; lists of parts are kept as
    their JSON text. Raises ValueError on malformed input.
    """
    raw = json.loads(data)
    if not isinstance(raw, dict):
        raise ValueError("request body must be a JSON object")

    raw_messages = _typed(raw, "messages", (list,), [])
    messages = []
    for raw_message in raw_messages:
        if raw_message is None:
            raw_message = {}
        if not isinstance(raw_message, dict):
            raise ValueError(f"invalid message: {raw_message!r}")
        if "content" not in raw_message:
            raise ValueError("failed to unmarshal content")
        messages.append(
            ChatCompletionMessage(
                role=_typed(raw_message, "role", (str,), ""),
                content=_parse_content(raw_message["content"]),
            )
        )

    return ChatCompletionRequest(
        model=_typed(raw, "model", (str,), ""),
        temperature=float(_typed(raw, "temperature", (int, float), 0.0)),
        stream=_typed(raw, "stream", (bool,), False),
        messages=messages,
    )