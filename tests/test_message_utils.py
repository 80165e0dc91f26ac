import base64
import json

import pytest
import responses

from simpleoneapi.message_utils import (
    ImageDataError,
    adjust_request_params,
    convert_system_messages_to_no_system,
    deep_copy_request,
    get_image_url_data,
    get_latest_message,
    get_system_message,
    is_multi_content_message,
    log_chat_completion_request,
    normalize_messages,
    parse_chat_completion_request,
    redact_request,
)
from simpleoneapi.messages import (
    ChatCompletionMessage,
    ChatCompletionRequest,
    ChatMessagePart,
    ImageURL,
)
from simpleoneapi.model_params import adjust_params_to_range


def _msg(role, content=""):
    return ChatCompletionMessage(role=role, content=content)


def _image_request(url):
    return ChatCompletionRequest(
        model="glm-4v",
        messages=[
            ChatCompletionMessage(
                role="user",
                multi_content=[
                    ChatMessagePart(type="text", text="describe"),
                    ChatMessagePart(type="image_url", image_url=ImageURL(url=url)),
                ],
            )
        ],
    )


def test_get_system_message_plain_and_multi():
    assert get_system_message([_msg("user", "hi"), _msg("system", "be nice")]) == "be nice"
    multi = ChatCompletionMessage(
        role="system",
        multi_content=[
            ChatMessagePart(type="image_url", image_url=ImageURL(url="http://example.com/a")),
            ChatMessagePart(type="text", text="rules"),
        ],
    )
    assert get_system_message([multi]) == "rules"
    assert get_system_message([_msg("user", "hi")]) == ""


def test_get_latest_message():
    assert get_latest_message([]) == ""
    assert get_latest_message([_msg("user", "a"), _msg("system", "s")]) == ""
    assert get_latest_message([_msg("system", "s"), _msg("user", "last")]) == "last"
    image_only = ChatCompletionMessage(
        role="user",
        multi_content=[ChatMessagePart(type="image_url", image_url=ImageURL(url="x"))],
    )
    assert get_latest_message([image_only]) == ""


def test_is_multi_content_message():
    assert is_multi_content_message([]) is False
    assert is_multi_content_message([_msg("user", "a")]) is False
    assert is_multi_content_message(_image_request("http://example.com/i.png").messages) is True


def test_convert_lone_system_becomes_user():
    original = [_msg("system", "only")]
    result = convert_system_messages_to_no_system(original)
    assert [(m.role, m.content) for m in result] == [("user", "only")]
    assert original[0].role == "system"


def test_convert_system_merged_into_next():
    result = convert_system_messages_to_no_system(
        [_msg("System", "sys"), _msg("user", "hello"), _msg("assistant", "ok")]
    )
    assert [m.role for m in result] == ["user", "assistant"]
    assert result[0].content == "sys\nhello"


def test_normalize_drops_repeated_roles_and_late_system():
    messages = [
        _msg("system", "s"),
        _msg("user", "a"),
        _msg("user", "b"),
        _msg("system", "later"),
        _msg("assistant", "c"),
    ]
    result = normalize_messages(messages, False)
    assert [(m.role, m.content) for m in result] == [
        ("system", "s"),
        ("user", "a"),
        ("assistant", "c"),
    ]
    kept = normalize_messages(messages, True)
    assert [m.content for m in kept] == ["s", "a", "later", "c"]


def test_normalize_fills_empty_and_converts_lone_system():
    assert [(m.role, m.content) for m in normalize_messages([_msg("system", "")], False)] == [
        ("user", " ")
    ]
    assert normalize_messages([], False) == []


def test_image_data_url():
    assert get_image_url_data("data:image/png;base64,AAAA") == ("AAAA", "image/png;base64")


@pytest.mark.parametrize("value", ["data:image/png;base64AAAA", "ftp://example.com/x.png", ""])
def test_image_bad_urls(value):
    with pytest.raises(ImageDataError):
        get_image_url_data(value)


def test_image_http_download():
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            "http://example.com/img.png",
            body=b"abc",
            status=200,
            content_type="image/png",
        )
        data, mime = get_image_url_data("http://example.com/img.png")
    assert base64.b64decode(data) == b"abc"
    assert mime == "image/png"


def test_image_http_error_status():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, "http://example.com/missing.png", status=404)
        with pytest.raises(ImageDataError, match="404"):
            get_image_url_data("http://example.com/missing.png")


def test_adjust_request_params_known_model():
    request = ChatCompletionRequest(model="glm-4", temperature=2.0, top_p=-1.0, max_tokens=99999)
    expected = adjust_params_to_range("glm-4", 2.0, -1.0, 99999)
    adjust_request_params(request)
    assert (request.temperature, request.top_p, request.max_tokens) == expected


def test_adjust_request_params_unknown_model_untouched():
    request = ChatCompletionRequest(model="other", temperature=2.0, top_p=3.0, max_tokens=99999)
    adjust_request_params(request)
    assert (request.temperature, request.top_p, request.max_tokens) == (2.0, 3.0, 99999)


def test_deep_copy_is_independent():
    request = _image_request("data:image/png;base64,AAAA")
    copied = deep_copy_request(request)
    assert copied == request
    copied.messages[0].multi_content[1].image_url.url = "changed"
    assert request.messages[0].multi_content[1].image_url.url == "data:image/png;base64,AAAA"


def test_redact_replaces_inline_images_only():
    inline = _image_request("data:image/png;base64,AAAA")
    redacted = redact_request(inline)
    assert redacted.messages[0].multi_content[1].image_url.url == "..."
    assert inline.messages[0].multi_content[1].image_url.url == "data:image/png;base64,AAAA"

    remote = _image_request("http://example.com/i.png")
    assert redact_request(remote) == remote


def test_log_returns_redacted_json():
    request = _image_request("data:image/png;base64,AAAA")
    logged = log_chat_completion_request(request)
    assert json.loads(logged) == redact_request(request).to_dict()


def test_log_returns_none_when_unserialisable():
    bad = ChatCompletionRequest(
        messages=[
            ChatCompletionMessage(
                role="user", content="x", multi_content=[ChatMessagePart(type="text", text="y")]
            )
        ]
    )
    assert log_chat_completion_request(bad) is None


def test_parse_string_and_object_content():
    body = json.dumps(
        {
            "model": "random",
            "temperature": 0.5,
            "stream": True,
            "messages": [
                {"role": "user", "content": "hi"},
                {"role": "assistant", "content": {"type": "text", "text": "there"}},
            ],
        }
    )
    request = parse_chat_completion_request(body)
    assert request.model == "random"
    assert request.temperature == 0.5
    assert request.stream is True
    assert [(m.role, m.content) for m in request.messages] == [
        ("user", "hi"),
        ("assistant", "there"),
    ]


def test_parse_array_content_kept_as_json():
    parts = [
        {"type": "text", "text": "look"},
        {"type": "image_url", "image_url": {"url": "http://example.com/i.png"}},
    ]
    request = parse_chat_completion_request(
        json.dumps({"model": "m", "messages": [{"role": "user", "content": parts}]}).encode()
    )
    assert json.loads(request.messages[0].content) == parts


def test_parse_unexpected_object_type():
    body = json.dumps({"messages": [{"role": "user", "content": {"type": "image_url"}}]})
    with pytest.raises(ValueError, match="unexpected content type: image_url"):
        parse_chat_completion_request(body)


@pytest.mark.parametrize(
    "body",
    [
        '{"messages": [{"role": "user"}]}',
        '{"messages": [{"role": "user", "content": 5}]}',
        '{"model": 3, "messages": []}',
        "not json",
    ],
)
def test_parse_rejects_malformed(body):
    with pytest.raises(ValueError):
        parse_chat_completion_request(body)