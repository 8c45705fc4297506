"""Error types raised by slm. main.main turns any SlmError into exit status 1."""

from __future__ import annotations


class SlmError(Exception):
    """Base class for every fatal condition."""


class ConfigError(SlmError):
    """Missing credential, empty prompt or bad environment setting."""


class InputError(SlmError):
    """Prompt could not be read from stdin."""


class HistoryError(SlmError):
    """History directory or file could not be created or opened for append."""


class RequestError(SlmError):
    """Request payload could not be built or serialized."""


class TransportError(SlmError):
    """Network failure before a response was received."""


class ApiError(SlmError):
    """Remote API rejected the request (non-OK status or embedded error message)."""

    def __init__(
        self,
        *,
        status_code: int | None = None,
        body: str | None = None,
        message: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.message = message
        if message:
            text = f"OpenAI API error: {message}"
        else:
            text = f"OpenAI API error: status {status_code}, body: {body or ''}"
        super().__init__(text)


class ResponseError(SlmError):
    """Response arrived but does not carry a usable reply."""


class DecodeError(ResponseError):
    """Response body is not a valid chat completion."""


class EmptyResponseError(ResponseError):
    """Response contains no choices."""


class HistoryFormatError(ValueError):
    """History file syntax error. Always recovered by history.store.load_history."""

    def __init__(self, lineno: int, reason: str) -> None:
        self.lineno = lineno
        super().__init__(f"line {lineno}: {reason}")
