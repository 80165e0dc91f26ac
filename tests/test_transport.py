import pytest
import requests
import responses

from simpleoneapi.transport import (
    ERROR_BODY_LIMIT,
    HTTPStatusError,
    check_status_code,
    normalize_sse_lines,
    raise_for_error_status,
    raise_for_error_status_truncated,
    send_http_request,
    send_sse_request,
    send_sse_request_with_headers,
)

URL = "http://upstream.example.com/v1/chat/completions"


@pytest.fixture
def mock():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def _get(mock, status, body):
    mock.add(responses.GET, URL, body=body, status=status)
    return requests.get(URL)


def test_check_status_code_ok_returns_none(mock):
    assert check_status_code(_get(mock, 200, "fine")) is None


def test_check_status_code_error(mock):
    with pytest.raises(HTTPStatusError) as info:
        check_status_code(_get(mock, 503, "down"))
    assert str(info.value) == "status 503: down"
    assert info.value.status_code == 503
    assert info.value.body == "down"


def test_raise_for_error_status_passes_success(mock):
    response = _get(mock, 201, "created")
    assert raise_for_error_status(response) is response


def test_raise_for_error_status_includes_body(mock):
    with pytest.raises(HTTPStatusError) as info:
        raise_for_error_status(_get(mock, 404, "missing model"))
    assert str(info.value).startswith("HTTP error: 404")
    assert str(info.value).endswith("body: missing model")
    assert info.value.body == "missing model"


def test_raise_for_error_status_truncated_limits_body(mock):
    with pytest.raises(HTTPStatusError) as info:
        raise_for_error_status_truncated(_get(mock, 500, "x" * 3000))
    assert len(info.value.body) == ERROR_BODY_LIMIT
    assert info.value.status_code == 500


def test_raise_for_error_status_truncated_short_body(mock):
    with pytest.raises(HTTPStatusError) as info:
        raise_for_error_status_truncated(_get(mock, 400, "bad"))
    assert info.value.body == "bad"


def test_normalize_sse_lines():
    lines = ["data:{}\n", "data: x\n", "event: y\n"]
    assert list(normalize_sse_lines(lines)) == ["data: {}\n", "data: x\n", "event: y\n"]


def test_normalize_sse_lines_only_first_prefix():
    result = list(normalize_sse_lines(["data:data:z\n"]))
    assert result == ["data: data:z\n"]


def test_send_http_request_returns_body_and_sets_headers(mock):
    mock.add(responses.POST, URL, body=b'{"ok":true}', status=200)
    result = send_http_request("token", URL, b'{"model":"m"}')
    assert result == b'{"ok":true}'
    sent = mock.calls[0].request
    assert sent.headers["Authorization"] == "Bearer token"
    assert sent.headers["Content-Type"] == "application/json"
    assert sent.body == b'{"model":"m"}'


def test_send_http_request_error_status(mock):
    mock.add(responses.POST, URL, body="boom", status=500)
    with pytest.raises(HTTPStatusError) as info:
        send_http_request("token", URL, b"{}")
    assert str(info.value) == "http status code: 500, boom"


def test_send_http_request_uses_session(mock):
    mock.add(responses.POST, URL, body=b"done", status=200)
    with requests.Session() as session:
        assert send_http_request("token", URL, b"{}", session) == b"done"


def test_send_sse_request_collects_data_lines(mock):
    body = "data: a\n\ndata:b\nevent: x\ndata: last"
    mock.add(responses.POST, URL, body=body, status=200)
    received = []
    send_sse_request("token", URL, b"{}", received.append)
    assert received == ["a", "b"]
    assert mock.calls[0].request.headers["Accept"] == "text/event-stream"


def test_send_sse_request_empty_error_body(mock):
    mock.add(responses.POST, URL, body="", status=429)
    with pytest.raises(HTTPStatusError) as info:
        send_sse_request("token", URL, b"{}", lambda data: None)
    assert str(info.value) == "http status code: 429, empty response body"


def test_send_sse_request_error_body(mock):
    mock.add(responses.POST, URL, body="slow down", status=429)
    with pytest.raises(HTTPStatusError) as info:
        send_sse_request("token", URL, b"{}", lambda data: None)
    assert info.value.body == "slow down"


def test_send_sse_request_with_headers_overrides_and_ignores_status(mock):
    mock.add(responses.POST, URL, body="data: one\n", status=500)
    received = []
    send_sse_request_with_headers(
        "token", URL, b"{}", received.append, None, {"X-Trace": "t1", "Authorization": "Bearer secret"}
    )
    assert received == ["one"]
    sent = mock.calls[0].request
    assert sent.headers["X-Trace"] == "t1"
    assert sent.headers["Authorization"] == "Bearer secret"
    assert "Accept" not in sent.headers or sent.headers["Accept"] != "text/event-stream"