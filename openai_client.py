"""OpenAI Chat Completions client: one blocking request, reply text or a typed error."""

from __future__ import annotations

import json
import logging
from typing import Any

import openai
from openai import OpenAI
from pydantic import ValidationError

from errors import (
    ApiError,
    DecodeError,
    EmptyResponseError,
    RequestError,
    TransportError,
)
from options import Options
from schemas import ChatRequest, ChatResponse, Message

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.openai.com/v1"


def make_client(api_key: str) -> OpenAI:
    """Client for the fixed endpoint. The SDK's own retries are disabled."""
    return OpenAI(api_key=api_key, base_url=API_BASE_URL, max_retries=0)


def _embedded_error(body: str) -> str | None:
    """error.message from a JSON object body, if present and non-empty."""
    try:
        data: Any = json.loads(body)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message")
    if isinstance(message, str) and message:
        return message
    return None


def create_message_chat(client: OpenAI, options: Options, messages: list[Message]) -> str:
    """
    POST {model, temperature, messages} to /chat/completions and return the first choice's content.
    Raises RequestError, TransportError, ApiError, DecodeError or EmptyResponseError.
    """
    try:
        request = ChatRequest(model=options.model, temperature=options.temperature, messages=messages)
        payload = request.model_dump(mode="json")
        # The SDK encodes the body as strict UTF-8 JSON; fail here instead of inside it.
        json.dumps(payload, ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (ValidationError, ValueError) as e:
        raise RequestError(f"marshalling request: {e}") from e

    logger.debug("sending %d messages to model %s", len(payload["messages"]), payload["model"])
    try:
        raw = client.chat.completions.with_raw_response.create(**payload)
    except openai.APIStatusError as e:
        raise ApiError(status_code=e.status_code, body=e.response.text) from e
    except openai.APIConnectionError as e:
        raise TransportError(f"request error: {e.__cause__ or e}") from e

    http_response = raw.http_response
    body = http_response.text
    logger.debug("response status %s, %d bytes", http_response.status_code, len(body))

    if http_response.status_code != 200:
        raise ApiError(status_code=http_response.status_code, body=body)

    message = _embedded_error(body)
    if message:
        raise ApiError(status_code=http_response.status_code, body=body, message=message)

    try:
        response = ChatResponse.model_validate_json(body)
    except ValidationError as e:
        raise DecodeError(f"decoding response: {e}") from e
    if not response.choices:
        raise EmptyResponseError("no choices in response")
    return response.choices[0].message.content or ""
