"""Unit tests for admin/services/takeover.py"""

from types import SimpleNamespace

from admin.services.takeover import (
    RESTORE_MESSAGE,
    TAKEOVER_MESSAGE,
    is_taken_over,
)


def _msg(content, timestamp, admin=True):
    return SimpleNamespace(content=content, timestamp=timestamp, is_admin_intervention=admin)


class TestIsTakenOver:
    def test_empty_transcript(self):
        assert is_taken_over([]) is False

    def test_takeover_marker(self):
        assert is_taken_over([_msg(TAKEOVER_MESSAGE, 10)]) is True

    def test_restore_after_takeover(self):
        messages = [_msg(TAKEOVER_MESSAGE, 10), _msg(RESTORE_MESSAGE, 20)]
        assert is_taken_over(messages) is False

    def test_takeover_after_restore(self):
        messages = [
            _msg(TAKEOVER_MESSAGE, 10),
            _msg(RESTORE_MESSAGE, 20),
            _msg(TAKEOVER_MESSAGE, 30),
        ]
        assert is_taken_over(messages) is True

    def test_same_timestamp_uses_position(self):
        messages = [_msg(TAKEOVER_MESSAGE, 10), _msg(RESTORE_MESSAGE, 10)]
        assert is_taken_over(messages) is False

    def test_learner_cannot_trigger_takeover(self):
        messages = [_msg(TAKEOVER_MESSAGE, 10, admin=False)]
        assert is_taken_over(messages) is False

    def test_only_restore(self):
        assert is_taken_over([_msg(RESTORE_MESSAGE, 5)]) is False
