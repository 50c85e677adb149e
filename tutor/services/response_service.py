"""Tutor reply generation for the classic and agent chat flows."""

import logging
import time
from typing import Optional
from sqlalchemy.orm import Session as DBSession

from config import get_settings
from shared.models.domain import ChatMessage
from shared.models.entities import CourseSession
from shared.repositories import SessionRepository
from shared.services.llm_service import LLMService, LLMServiceError
from shared.utils.exceptions import (
    ConfigurationException,
    LLMProviderException,
    SessionNotFoundException,
)
from shared.utils.message_utils import now_ms
from admin.services.agent_usage_service import AgentUsageService
from admin.services.course_docs_service import CourseDocsService
from admin.services.course_settings_service import CourseSettingsService, FALLBACK_SETTINGS
from admin.services.takeover import is_taken_over
from tutor.prompts.course_prompts import (
    AGENT_WELCOME_MESSAGE,
    build_agent_system_prompt,
    build_course_system_prompt,
)
from tutor.services.scoring import compute_progress
from tutor.services.session_service import CourseSessionService

logger = logging.getLogger("tutor.response_service")

START_MESSAGE = "start"
DUPLICATE_WINDOW_MS = 5000


class TutorResponseService:
    """Calls the chat model for a learner turn and records the exchange."""

    def __init__(self, db: DBSession, llm_service: Optional[LLMService] = None):
        self.db = db
        self.session_repo = SessionRepository(db)
        self.settings_service = CourseSettingsService(db)
        self.docs_service = CourseDocsService(db)
        self.usage_service = AgentUsageService(db)
        self._llm_service = llm_service

    # ─── Classic tutor ────────────────────────────────────────────────

    def generate_response(self, session_id: str, user_message: str) -> str:
        """
        Generate a tutor reply for the classic chat flow.

        Returns:
            The assistant reply, or "" while an admin has taken over the session

        Raises:
            SessionNotFoundException: Unknown session
            ConfigurationException: No OpenAI key configured
            LLMProviderException: The model call failed
        """
        session = self._require_session(session_id)
        llm = self._get_llm_service()

        if is_taken_over(session.messages):
            return self._store_without_reply(session, user_message)

        question = CourseSessionService.current_question_for(session)
        total_questions, max_score = self._course_limits(session, "default")
        system_prompt = build_course_system_prompt(
            course_type=session.course_type,
            current_question=session.current_question,
            total_questions=session.total_questions,
            score=session.score,
            max_score=max_score,
            question=question,
        )

        result = self._call_model(llm, session, system_prompt, user_message)
        reply = result["output_text"]

        self.session_repo.append_message(session, "user", user_message, commit=False)
        self.session_repo.append_message(session, "assistant", reply, commit=False)
        self._apply_progress(session, user_message, total_questions, max_score)
        self.session_repo.save(session)
        return reply

    # ─── Agent tutor ──────────────────────────────────────────────────

    def generate_response_with_agent(self, session_id: str, user_message: str) -> str:
        """
        Generate a tutor reply for the agent flow.

        "start" returns (and stores) the fixed welcome message without a model
        call. A user message identical to one stored in the last five seconds
        is not stored twice.
        """
        llm = self._get_llm_service()
        session = self._require_session(session_id)
        logger.info(
            f"Agent response for session {session_id} "
            f"({session.course_type}, question {session.current_question}, "
            f"{len(session.messages)} messages)"
        )

        if is_taken_over(session.messages):
            return self._store_without_reply(session, user_message)

        if user_message.strip().lower() == START_MESSAGE:
            self.session_repo.append_message(session, "assistant", AGENT_WELCOME_MESSAGE)
            return AGENT_WELCOME_MESSAGE

        system_prompt = build_agent_system_prompt(self.docs_service.get_active_docs())

        started = time.time()
        result = self._call_model(llm, session, system_prompt, user_message)
        response_time_ms = int((time.time() - started) * 1000)
        reply = result["output_text"]
        if not reply:
            raise LLMProviderException(ValueError("No response generated by the model"))

        if not self._is_recent_duplicate(session, user_message):
            self.session_repo.append_message(session, "user", user_message, commit=False)
        self.session_repo.append_message(session, "assistant", reply, commit=False)

        total_questions, max_score = self._course_limits(session, session.difficulty or "default")
        self._apply_progress(session, user_message, total_questions, max_score)
        self.session_repo.save(session)

        usage = result["usage"]
        self.usage_service.track_usage(
            session_id=session_id,
            input_tokens=usage["input_tokens"],
            output_tokens=usage["output_tokens"],
            total_tokens=usage["total_tokens"],
            response_time_ms=response_time_ms,
        )
        return reply

    # ─── Helpers ──────────────────────────────────────────────────────

    def _require_session(self, session_id: str) -> CourseSession:
        session = self.session_repo.get_by_session_id(session_id)
        if not session:
            raise SessionNotFoundException(session_id)
        return session

    def _get_llm_service(self) -> LLMService:
        if self._llm_service is None:
            settings = get_settings()
            if not settings.openai_api_key:
                raise ConfigurationException("openai_api_key", "OPENAI_API_KEY is not configured")
            self._llm_service = LLMService(
                api_key=settings.openai_api_key,
                model_id=settings.llm_model,
                timeout=settings.llm_timeout,
            )
        return self._llm_service

    def _store_without_reply(self, session: CourseSession, user_message: str) -> str:
        logger.info(f"Session {session.session_id} is under admin takeover; storing message only")
        self.session_repo.append_message(session, "user", user_message)
        return ""

    def _call_model(
        self,
        llm: LLMService,
        session: CourseSession,
        system_prompt: str,
        user_message: str,
    ) -> dict:
        settings = get_settings()
        messages = [ChatMessage(role="system", content=system_prompt)]
        messages.extend(ChatMessage(role=m.role, content=m.content) for m in session.messages)
        messages.append(ChatMessage(role="user", content=user_message))
        try:
            return llm.chat(
                [m.model_dump() for m in messages],
                max_tokens=settings.llm_max_tokens,
                temperature=settings.llm_temperature,
            )
        except LLMServiceError as e:
            logger.error(f"Tutor model call failed for session {session.session_id}: {e}")
            raise LLMProviderException(e) from e

    def _course_limits(self, session: CourseSession, difficulty: str) -> tuple[int, int]:
        """(total_questions, max_score) for scoring this session."""
        if session.course_type:
            settings = self.settings_service.get_course_settings(session.course_type, difficulty)
            default_total, max_score = settings.total_questions, settings.max_score
        else:
            default_total, max_score = FALLBACK_SETTINGS
        return session.total_questions or default_total, max_score

    def _apply_progress(
        self,
        session: CourseSession,
        user_message: str,
        total_questions: int,
        max_score: int,
    ) -> None:
        progress = compute_progress(
            current_question=session.current_question,
            score=session.score,
            total_questions=total_questions,
            max_score=max_score,
            user_message=user_message,
        )
        if not progress.applied:
            return
        session.current_question = progress.new_question
        session.score = progress.new_score
        session.last_action_was_skip = progress.was_skip

    @staticmethod
    def _is_recent_duplicate(session: CourseSession, user_message: str) -> bool:
        if not session.messages:
            return False
        last = session.messages[-1]
        return (
            last.role == "user"
            and last.content == user_message
            and now_ms() - last.timestamp < DUPLICATE_WINDOW_MS
        )
