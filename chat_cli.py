"""One chat turn: optional history, request, print, optional persist."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from openai import OpenAI

from history import append_history, ensure_history_dir, load_history
from openai_client import create_message_chat
from options import Options
from schemas import Message

logger = logging.getLogger(__name__)


def build_messages(options: Options, history: list[Message]) -> list[Message]:
    """History first, then the system prompt if any, then the user prompt."""
    messages = list(history)
    if options.system_prompt:
        messages.append(Message(role="system", content=options.system_prompt))
    messages.append(Message(role="user", content=options.user_prompt))
    return messages


def run_once(options: Options, client: OpenAI, out: TextIO | None = None) -> str:
    """Send the prompt and print the reply. The history file is touched only with -c."""
    out = out if out is not None else sys.stdout
    history: list[Message] = []
    if options.continue_conversation:
        logger.debug("history file: %s", options.history_path)
        ensure_history_dir(options.history_path.parent)
        history = load_history(options.history_path)

    reply = create_message_chat(client, options, build_messages(options, history))
    print(reply, file=out)

    if options.continue_conversation:
        append_history(options.history_path, options.user_prompt, reply)
    return reply
