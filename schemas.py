"""Pydantic schemas for messages and the chat-completion request/response bodies."""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]
ROLES: tuple[str, ...] = get_args(Role)


class Message(BaseModel):
    """One conversation turn. Never mutated once created."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class ChatRequest(BaseModel):
    """Body of POST /chat/completions."""

    model: str = Field(min_length=1)
    temperature: float = Field(allow_inf_nan=False)
    messages: list[Message] = Field(min_length=1)


class ChoiceMessage(BaseModel):
    role: str | None = None
    content: str | None = None


class Choice(BaseModel):
    message: ChoiceMessage = Field(default_factory=ChoiceMessage)


class ChatResponse(BaseModel):
    """Subset of the chat-completion response that slm reads; other keys are ignored."""

    choices: list[Choice] = Field(default_factory=list)
