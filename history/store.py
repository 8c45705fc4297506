"""History store: turn record-log entries into Messages and back."""

from __future__ import annotations

import logging
from pathlib import Path

from errors import HistoryError, HistoryFormatError
from history.log import RecordLog
from history.ndb import Record, last_value
from schemas import ROLES, Message

logger = logging.getLogger(__name__)

MESSAGE_TAG = "message"


def ensure_history_dir(directory: str | Path) -> None:
    """Create the history directory and its parents if absent."""
    try:
        Path(directory).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise HistoryError(f"creating history dir {directory}: {e}") from e


def _message_from_record(record: Record) -> Message | None:
    role = last_value(record, "role")
    content = last_value(record, "content")
    if not role or not content:
        return None
    if role not in ROLES:
        logger.debug("skipping history record with unknown role %r", role)
        return None
    return Message(role=role, content=content)


def load_history(path: str | Path) -> list[Message]:
    """
    Read all messages from the history file in file order.
    A missing or unparsable file is treated as "no history" and yields [].
    Records without a non-empty role and content are skipped.
    """
    log = RecordLog(path)
    try:
        records = list(log)
    except FileNotFoundError:
        logger.debug("no history file at %s", log.path)
        return []
    except (OSError, UnicodeDecodeError, HistoryFormatError) as e:
        logger.warning("ignoring history file %s: %s", log.path, e)
        return []

    messages = []
    for record in records:
        message = _message_from_record(record)
        if message is not None:
            messages.append(message)
    logger.debug("loaded %d of %d history records from %s", len(messages), len(records), log.path)
    return messages


def _record_for(role: str, content: str) -> Record:
    return ((MESSAGE_TAG, ""), ("role", role), ("content", content))


def append_history(path: str | Path, user_prompt: str, reply: str) -> None:
    """Append the user prompt and the assistant reply as two records."""
    log = RecordLog(path)
    try:
        log.append(_record_for("user", user_prompt), _record_for("assistant", reply))
    except OSError as e:
        raise HistoryError(f"opening history file {log.path}: {e}") from e
