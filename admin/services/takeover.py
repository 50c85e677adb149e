"""Admin takeover detection from transcript markers."""
from typing import Iterable, Optional

TAKEOVER_MARKER = "🔴 ADMIN TAKEOVER"
RESTORE_MARKER = "🟢 AI RESTORED"

TAKEOVER_MESSAGE = f"{TAKEOVER_MARKER}: AI responses disabled, human instructor active"
RESTORE_MESSAGE = f"{RESTORE_MARKER}: Automatic responses re-enabled"
TAKEOVER_NOTE = "Session taken over by admin"
RESTORE_NOTE = "Session returned to AI"


def _latest_marker(messages: list, marker: str) -> Optional[tuple[int, int]]:
    """(timestamp, position) of the newest admin message containing ``marker``."""
    latest = None
    for position, message in enumerate(messages):
        if not message.is_admin_intervention or marker not in message.content:
            continue
        key = (message.timestamp, position)
        if latest is None or key > latest:
            latest = key
    return latest


def is_taken_over(messages: Iterable) -> bool:
    """
    True when the newest takeover marker is newer than the newest restore marker.

    Only admin-intervention messages count, so a learner typing the marker
    text cannot lock the tutor.
    """
    messages = list(messages)
    takeover = _latest_marker(messages, TAKEOVER_MARKER)
    if takeover is None:
        return False
    restore = _latest_marker(messages, RESTORE_MARKER)
    return restore is None or takeover > restore
