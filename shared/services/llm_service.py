"""
LLM Service: centralized interface for tutor chat-model calls.

Wraps the OpenAI Chat Completions API with retry/backoff and structured
JSON logging. The primary entry point is `chat()`.
"""

import json
import time
from typing import Dict, Any, List, Optional
from openai import OpenAI, OpenAIError, RateLimitError, APITimeoutError
import logging

logger = logging.getLogger(__name__)


class LLMService:
    """
    Service for making LLM API calls with retry logic and error handling.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model_id: str = "gpt-4o-mini",
        max_retries: int = 3,
        initial_retry_delay: float = 1.0,
        timeout: int = 60,
    ):
        self.client = OpenAI(api_key=api_key)
        self.model_id = model_id
        self.max_retries = max_retries
        self.initial_retry_delay = initial_retry_delay
        self.timeout = timeout

    # ─── Primary entry point ───────────────────────────────────────────

    def chat(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int = 800,
        temperature: float = 0.7,
    ) -> Dict[str, Any]:
        """
        Send a role/content message list to the chat model.

        Always returns: {output_text: str, usage: {input_tokens, output_tokens, total_tokens}}
        """
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "starting",
            "model": self.model_id,
            "params": {
                "message_count": len(messages),
                "max_tokens": max_tokens,
                "temperature": temperature,
            }
        }))

        def _api_call():
            response = self.client.chat.completions.create(
                model=self.model_id,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
                timeout=self.timeout,
            )
            return {
                "output_text": response.choices[0].message.content or "",
                "usage": self._usage_dict(getattr(response, "usage", None)),
            }

        return self._execute_with_retry(_api_call, self.model_id)

    # ─── Helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _usage_dict(usage: Optional[Any]) -> Dict[str, int]:
        """Normalize the SDK usage object; missing counts become 0."""
        if usage is None:
            return {"input_tokens": 0, "output_tokens": 0, "total_tokens": 0}
        input_tokens = getattr(usage, "prompt_tokens", 0) or 0
        output_tokens = getattr(usage, "completion_tokens", 0) or 0
        total_tokens = getattr(usage, "total_tokens", 0) or (input_tokens + output_tokens)
        return {
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": total_tokens,
        }

    def _execute_with_retry(self, api_call_fn, model_name: str) -> Any:
        """Execute API call with exponential backoff retry logic."""
        last_error = None
        delay = self.initial_retry_delay
        start_time = time.time()

        for attempt in range(self.max_retries):
            try:
                result = api_call_fn()
                duration_ms = int((time.time() - start_time) * 1000)

                logger.info(json.dumps({
                    "step": "LLM_CALL",
                    "status": "complete",
                    "model": model_name,
                    "output": {"response_length": len(str(result)) if result else 0},
                    "duration_ms": duration_ms,
                    "attempts": attempt + 1
                }))

                if attempt > 0:
                    logger.info(f"{model_name} call succeeded on attempt {attempt + 1}")
                return result

            except RateLimitError as e:
                last_error = e
                logger.warning(
                    f"{model_name} rate limit hit (attempt {attempt + 1}/{self.max_retries}). "
                    f"Retrying in {delay}s..."
                )
                time.sleep(delay)
                delay *= 2

            except APITimeoutError as e:
                last_error = e
                logger.warning(
                    f"{model_name} timeout (attempt {attempt + 1}/{self.max_retries}). "
                    f"Retrying in {delay}s..."
                )
                time.sleep(delay)
                delay *= 2

            except OpenAIError as e:
                logger.error(f"{model_name} API error: {str(e)}")
                raise LLMServiceError(f"{model_name} API error: {str(e)}", model_name) from e

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "failed",
            "model": model_name,
            "error": str(last_error),
            "duration_ms": duration_ms,
            "attempts": self.max_retries
        }))
        raise LLMServiceError(
            f"{model_name} failed after {self.max_retries} attempts. Last error: {str(last_error)}",
            model_name,
            self.max_retries,
        ) from last_error


class LLMServiceError(Exception):
    """Custom exception for LLM service errors"""

    def __init__(self, message: str, model_name: Optional[str] = None, attempts: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.model_name = model_name
        self.attempts = attempts
