"""Tests for create_message_chat: payload, status handling and response decoding."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from errors import (
    ApiError,
    DecodeError,
    EmptyResponseError,
    RequestError,
    ResponseError,
    TransportError,
)
from openai_client import API_BASE_URL, create_message_chat, make_client
from options import Options
from schemas import Message

URL = f"{API_BASE_URL}/chat/completions"
OK_BODY = '{"choices":[{"message":{"role":"assistant","content":"hello"}}]}'


def _options(**kwargs) -> Options:
    values = {
        "model": "gpt-4o-mini",
        "temperature": 0.3,
        "user_prompt": "hi",
        "api_key": "sk-test",
        "history_path": Path("/tmp/history.ndb"),
    }
    values.update(kwargs)
    return Options(**values)


def _raw(status: int, body: str) -> SimpleNamespace:
    return SimpleNamespace(http_response=httpx.Response(status, text=body, request=httpx.Request("POST", URL)))


def _client(result=None, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    create = client.chat.completions.with_raw_response.create
    if error is not None:
        create.side_effect = error
    else:
        create.return_value = result
    return client


def _status_error(status: int, body: str) -> openai.APIStatusError:
    response = httpx.Response(status, text=body, request=httpx.Request("POST", URL))
    return openai.APIStatusError("error", response=response, body=None)


MESSAGES = [Message(role="system", content="be brief"), Message(role="user", content="hi")]


def test_returns_first_choice_content_and_sends_payload():
    body = '{"id":"x","choices":[{"message":{"role":"assistant","content":"first"}},{"message":{"content":"second"}}]}'
    client = _client(_raw(200, body))

    assert create_message_chat(client, _options(), MESSAGES) == "first"

    kwargs = client.chat.completions.with_raw_response.create.call_args.kwargs
    assert kwargs == {
        "model": "gpt-4o-mini",
        "temperature": 0.3,
        "messages": [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "hi"},
        ],
    }


def test_null_content_is_empty_string():
    client = _client(_raw(200, '{"choices":[{"message":{"role":"assistant","content":null}}]}'))
    assert create_message_chat(client, _options(), MESSAGES) == ""


def test_status_error_carries_status_and_body():
    client = _client(error=_status_error(500, '{"error":{}}'))
    with pytest.raises(ApiError) as exc:
        create_message_chat(client, _options(), MESSAGES)
    assert exc.value.status_code == 500
    assert exc.value.body == '{"error":{}}'
    assert "status 500" in str(exc.value)


def test_non_200_success_status_is_api_error():
    client = _client(_raw(202, OK_BODY))
    with pytest.raises(ApiError) as exc:
        create_message_chat(client, _options(), MESSAGES)
    assert exc.value.status_code == 202


def test_embedded_error_message_on_200():
    client = _client(_raw(200, '{"error":{"message":"You exceeded your current quota"}}'))
    with pytest.raises(ApiError, match="You exceeded your current quota") as exc:
        create_message_chat(client, _options(), MESSAGES)
    assert exc.value.message == "You exceeded your current quota"


def test_empty_embedded_error_falls_through_to_decode():
    client = _client(_raw(200, '{"error":{"message":""},"choices":[{"message":{"content":"ok"}}]}'))
    assert create_message_chat(client, _options(), MESSAGES) == "ok"


def test_connection_error_is_transport_error():
    error = openai.APIConnectionError(request=httpx.Request("POST", URL))
    client = _client(error=error)
    with pytest.raises(TransportError):
        create_message_chat(client, _options(), MESSAGES)


def test_timeout_is_transport_error():
    error = openai.APITimeoutError(request=httpx.Request("POST", URL))
    client = _client(error=error)
    with pytest.raises(TransportError):
        create_message_chat(client, _options(), MESSAGES)


@pytest.mark.parametrize("body", ["not json", "[1, 2]", '{"choices": "nope"}'])
def test_malformed_body_is_decode_error(body):
    client = _client(_raw(200, body))
    with pytest.raises(DecodeError):
        create_message_chat(client, _options(), MESSAGES)


@pytest.mark.parametrize("body", ['{"choices":[]}', "{}"])
def test_no_choices_is_empty_response(body):
    client = _client(_raw(200, body))
    with pytest.raises(EmptyResponseError) as exc:
        create_message_chat(client, _options(), MESSAGES)
    assert isinstance(exc.value, ResponseError)


def test_invalid_request_is_not_sent():
    client = _client(_raw(200, OK_BODY))
    with pytest.raises(RequestError):
        create_message_chat(client, _options(model=""), MESSAGES)
    client.chat.completions.with_raw_response.create.assert_not_called()


def test_make_client_targets_fixed_endpoint_without_retries():
    client = make_client("sk-test")
    assert str(client.base_url).rstrip("/") == API_BASE_URL
    assert client.max_retries == 0
    assert client.api_key == "sk-test"


@pytest.mark.parametrize("temperature", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_temperature_is_request_error(temperature):
    client = _client(_raw(200, OK_BODY))
    with pytest.raises(RequestError, match="marshalling request"):
        create_message_chat(client, _options(temperature=temperature), MESSAGES)
    client.chat.completions.with_raw_response.create.assert_not_called()


def test_unencodable_text_is_request_error():
    client = _client(_raw(200, OK_BODY))
    messages = [Message(role="user", content="hi \udcff")]
    with pytest.raises(RequestError, match="marshalling request"):
        create_message_chat(client, _options(), messages)
    client.chat.completions.with_raw_response.create.assert_not_called()
