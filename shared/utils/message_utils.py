"""Helpers for session message ids, timestamps and previews."""
import random
import string
import time
from datetime import datetime, timezone
from typing import Iterable, Optional

_ID_ALPHABET = string.ascii_lowercase + string.digits


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def datetime_to_ms(value: Optional[datetime]) -> int:
    """Milliseconds since the epoch for a naive UTC datetime (0 for None)."""
    if value is None:
        return 0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def generate_message_id(session_id: str, timestamp: int) -> str:
    """Build a new message id: ``{session_id}_msg_{timestamp}_{9 random chars}``."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{session_id}_msg_{timestamp}_{suffix}"


def fallback_message_id(session_id: str, index: int, timestamp: int) -> str:
    """Positional id used for messages that were stored without one."""
    return f"{session_id}_msg_{index}_{timestamp}"


def effective_message_id(session_id: str, index: int, message) -> str:
    return message.message_id or fallback_message_id(session_id, index, message.timestamp)


def find_message_index(session_id: str, messages: list, message_id: str) -> Optional[int]:
    """
    Locate a message by stored id or positional fallback id.

    Returns:
        Index into ``messages`` or None when nothing matches.
    """
    for index, message in enumerate(messages):
        if message.message_id == message_id:
            return index
        if fallback_message_id(session_id, index, message.timestamp) == message_id:
            return index
    return None


def preview(content: str, length: int = 50) -> str:
    """First ``length`` characters followed by an ellipsis."""
    return content[:length] + "..."


def last_activity_ms(messages: Iterable, created_at_ms: int) -> int:
    """Newest message timestamp, or the session creation time when there are none."""
    timestamps = [m.timestamp for m in messages]
    return max(timestamps) if timestamps else created_at_ms


def message_to_dict(session_id: str, index: int, message) -> dict:
    """API shape of a transcript entry, with its effective id."""
    return {
        "message_id": effective_message_id(session_id, index, message),
        "role": message.role,
        "content": message.content,
        "timestamp": message.timestamp,
        "is_admin_intervention": message.is_admin_intervention,
        "admin_note": message.admin_note,
        "is_voice_message": message.is_voice_message,
        "voice_command": message.voice_command,
    }
