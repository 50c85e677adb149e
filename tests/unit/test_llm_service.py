"""
Unit tests for LLMService.

Tests the chat call, usage normalization and retry logic. The OpenAI client
is mocked.
"""

import pytest
from unittest.mock import Mock, patch

from shared.services.llm_service import LLMService, LLMServiceError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_chat_response(content="Hello!", usage=None):
    """Create a mock response for client.chat.completions.create."""
    response = Mock()
    response.choices = [Mock(message=Mock(content=content))]
    response.usage = usage
    return response


def _service(mock_openai_cls, **kwargs):
    mock_client = Mock()
    mock_openai_cls.return_value = mock_client
    return LLMService(api_key="fake-key", **kwargs), mock_client


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------

class TestLLMServiceInit:
    @patch("shared.services.llm_service.OpenAI")
    def test_defaults(self, mock_openai_cls):
        service, _ = _service(mock_openai_cls)

        mock_openai_cls.assert_called_once_with(api_key="fake-key")
        assert service.model_id == "gpt-4o-mini"
        assert service.max_retries == 3
        assert service.initial_retry_delay == 1.0
        assert service.timeout == 60


# ---------------------------------------------------------------------------
# chat
# ---------------------------------------------------------------------------

class TestChat:
    @patch("shared.services.llm_service.OpenAI")
    def test_happy_path(self, mock_openai_cls):
        service, client = _service(mock_openai_cls, model_id="gpt-4o")
        usage = Mock(prompt_tokens=12, completion_tokens=8, total_tokens=20)
        client.chat.completions.create.return_value = _make_chat_response("Hi there", usage)

        messages = [{"role": "user", "content": "hello"}]
        result = service.chat(messages, max_tokens=100, temperature=0.2)

        assert result == {
            "output_text": "Hi there",
            "usage": {"input_tokens": 12, "output_tokens": 8, "total_tokens": 20},
        }
        client.chat.completions.create.assert_called_once_with(
            model="gpt-4o",
            messages=messages,
            max_tokens=100,
            temperature=0.2,
            timeout=60,
        )

    @patch("shared.services.llm_service.OpenAI")
    def test_none_content_becomes_empty(self, mock_openai_cls):
        service, client = _service(mock_openai_cls)
        client.chat.completions.create.return_value = _make_chat_response(None)

        result = service.chat([{"role": "user", "content": "hi"}])

        assert result["output_text"] == ""
        assert result["usage"] == {"input_tokens": 0, "output_tokens": 0, "total_tokens": 0}

    def test_usage_total_derived(self):
        usage = Mock(prompt_tokens=3, completion_tokens=4, total_tokens=None)
        assert LLMService._usage_dict(usage)["total_tokens"] == 7


# ---------------------------------------------------------------------------
# Retry logic
# ---------------------------------------------------------------------------

class TestRetry:
    @patch("shared.services.llm_service.time")
    @patch("shared.services.llm_service.OpenAI")
    def test_rate_limit_then_success(self, mock_openai_cls, mock_time):
        mock_time.time.return_value = 0
        mock_time.sleep = Mock()
        from openai import RateLimitError

        service, client = _service(mock_openai_cls)
        client.chat.completions.create.side_effect = [
            RateLimitError("rate limit", response=Mock(status_code=429), body=None),
            _make_chat_response("ok"),
        ]

        result = service.chat([{"role": "user", "content": "hi"}])

        assert result["output_text"] == "ok"
        mock_time.sleep.assert_called_once_with(1.0)

    @patch("shared.services.llm_service.time")
    @patch("shared.services.llm_service.OpenAI")
    def test_exhausted_retries_double_delay(self, mock_openai_cls, mock_time):
        mock_time.time.return_value = 0
        mock_time.sleep = Mock()
        from openai import APITimeoutError

        service, client = _service(mock_openai_cls)
        client.chat.completions.create.side_effect = APITimeoutError(request=Mock())

        with pytest.raises(LLMServiceError) as exc_info:
            service.chat([{"role": "user", "content": "hi"}])

        assert exc_info.value.attempts == 3
        assert [c.args[0] for c in mock_time.sleep.call_args_list] == [1.0, 2.0, 4.0]

    @patch("shared.services.llm_service.time")
    @patch("shared.services.llm_service.OpenAI")
    def test_other_errors_not_retried(self, mock_openai_cls, mock_time):
        mock_time.time.return_value = 0
        mock_time.sleep = Mock()
        from openai import OpenAIError

        service, client = _service(mock_openai_cls)
        client.chat.completions.create.side_effect = OpenAIError("bad request")

        with pytest.raises(LLMServiceError):
            service.chat([{"role": "user", "content": "hi"}])

        assert client.chat.completions.create.call_count == 1
        mock_time.sleep.assert_not_called()
