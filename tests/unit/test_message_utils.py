"""Unit tests for shared/utils/message_utils.py and shared/utils/number_utils.py"""

import re
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from shared.utils.message_utils import (
    datetime_to_ms,
    effective_message_id,
    fallback_message_id,
    find_message_index,
    generate_message_id,
    last_activity_ms,
    message_to_dict,
    preview,
)
from shared.utils.number_utils import round_half_up


def _msg(message_id=None, timestamp=1000, role="assistant", content="hi", **extra):
    fields = {
        "message_id": message_id,
        "timestamp": timestamp,
        "role": role,
        "content": content,
        "is_admin_intervention": False,
        "admin_note": None,
        "is_voice_message": False,
        "voice_command": None,
    }
    fields.update(extra)
    return SimpleNamespace(**fields)


# ===========================================================================
# Message ids
# ===========================================================================

class TestMessageIds:
    def test_generated_id_format(self):
        message_id = generate_message_id("sess-1", 1700000000000)
        assert re.fullmatch(r"sess-1_msg_1700000000000_[a-z0-9]{9}", message_id)

    def test_generated_ids_differ(self):
        assert generate_message_id("s", 1) != generate_message_id("s", 1)

    def test_fallback_id_is_positional(self):
        assert fallback_message_id("sess-1", 3, 555) == "sess-1_msg_3_555"

    def test_effective_id_prefers_stored(self):
        assert effective_message_id("s", 0, _msg(message_id="stored")) == "stored"

    def test_effective_id_falls_back(self):
        assert effective_message_id("s", 2, _msg(timestamp=42)) == "s_msg_2_42"


class TestFindMessageIndex:
    def test_by_stored_id(self):
        messages = [_msg("a"), _msg("b")]
        assert find_message_index("s", messages, "b") == 1

    def test_by_fallback_id(self):
        messages = [_msg("a"), _msg(None, timestamp=99)]
        assert find_message_index("s", messages, "s_msg_1_99") == 1

    def test_missing(self):
        assert find_message_index("s", [_msg("a")], "zzz") is None


# ===========================================================================
# Formatting helpers
# ===========================================================================

class TestPreview:
    def test_always_appends_ellipsis(self):
        assert preview("short") == "short..."

    def test_truncates(self):
        assert preview("x" * 80) == "x" * 50 + "..."

    def test_custom_length(self):
        assert preview("abcdef", 3) == "abc..."


class TestLastActivity:
    def test_newest_timestamp(self):
        assert last_activity_ms([_msg(timestamp=5), _msg(timestamp=9)], 1) == 9

    def test_falls_back_to_created(self):
        assert last_activity_ms([], 123) == 123


class TestDatetimeToMs:
    def test_naive_is_utc(self):
        assert datetime_to_ms(datetime(1970, 1, 1, 0, 0, 1)) == 1000

    def test_aware(self):
        assert datetime_to_ms(datetime(1970, 1, 1, 0, 0, 2, tzinfo=timezone.utc)) == 2000

    def test_none(self):
        assert datetime_to_ms(None) == 0


class TestMessageToDict:
    def test_shape(self):
        data = message_to_dict("s", 0, _msg(None, timestamp=7, role="user", content="hello"))

        assert data["message_id"] == "s_msg_0_7"
        assert data["role"] == "user"
        assert data["content"] == "hello"
        assert data["timestamp"] == 7
        assert data["is_admin_intervention"] is False


# ===========================================================================
# Rounding
# ===========================================================================

class TestRoundHalfUp:
    @pytest.mark.parametrize("value,digits,expected", [
        (2.5, 0, 3),
        (3.5, 0, 4),
        (1.234, 2, 1.23),
        (1.236, 2, 1.24),
        (66.66666, 1, 66.7),
        (0, 2, 0),
    ])
    def test_values(self, value, digits, expected):
        assert round_half_up(value, digits) == pytest.approx(expected)
