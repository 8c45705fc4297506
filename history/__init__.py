"""Conversation history: append-only attribute-record file."""

from history.log import RecordLog
from history.store import append_history, ensure_history_dir, load_history

__all__ = [
    "RecordLog",
    "append_history",
    "ensure_history_dir",
    "load_history",
]
