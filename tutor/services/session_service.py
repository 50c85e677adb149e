"""Learner session lifecycle: creation, transcript, progress and question lookup."""

import logging
from typing import Optional
from sqlalchemy.orm import Session as DBSession

from shared.models.domain import Question
from shared.models.entities import CourseSession, SessionMessage
from shared.repositories import SessionRepository
from shared.utils.exceptions import SessionNotFoundException
from admin.services.course_settings_service import CourseSettingsService, FALLBACK_SETTINGS
from tutor.questions import get_questions_for_course, generate_randomized_question_order

logger = logging.getLogger("tutor.session_service")


class CourseSessionService:
    """Creates sessions and tracks learner progress through a course."""

    def __init__(self, db: DBSession):
        self.db = db
        self.session_repo = SessionRepository(db)
        self.settings_service = CourseSettingsService(db)

    def create_session(
        self,
        session_id: str,
        course_type: Optional[str] = None,
        difficulty: str = "default",
        force_new: bool = False,
    ) -> CourseSession:
        """
        Create a session, or return the existing one with the same id.

        Args:
            session_id: Client-chosen identifier
            course_type: Course the learner picked, if known yet
            difficulty: Settings difficulty key
            force_new: Replace an existing record instead of returning it

        Returns:
            The new or existing CourseSession
        """
        existing = self.session_repo.get_by_session_id(session_id)
        if existing:
            if not force_new:
                return existing
            logger.info(f"Replacing session {session_id} (force_new)")
            self.session_repo.delete(existing)

        if course_type:
            total_questions = self.settings_service.get_course_settings(
                course_type, difficulty
            ).total_questions
        else:
            total_questions = FALLBACK_SETTINGS[0]

        session = self.session_repo.create(
            session_id=session_id,
            course_type=course_type,
            difficulty=difficulty,
            total_questions=total_questions,
            question_order=generate_randomized_question_order(total_questions),
        )
        logger.info(f"Created session {session_id} ({course_type}, {total_questions} questions)")
        return session

    def get_session(self, session_id: str) -> Optional[CourseSession]:
        return self.session_repo.get_by_session_id(session_id)

    def require_session(self, session_id: str) -> CourseSession:
        session = self.session_repo.get_by_session_id(session_id)
        if not session:
            raise SessionNotFoundException(session_id)
        return session

    def add_message(
        self,
        session_id: str,
        role: str,
        content: str,
        is_voice_message: bool = False,
        voice_command: Optional[str] = None,
    ) -> SessionMessage:
        session = self.require_session(session_id)
        return self.session_repo.append_message(
            session,
            role,
            content,
            is_voice_message=is_voice_message,
            voice_command=voice_command,
        )

    def update_session(
        self,
        session_id: str,
        course_type: Optional[str] = None,
        current_question: Optional[int] = None,
        total_questions: Optional[int] = None,
        score: Optional[int] = None,
        is_completed: Optional[bool] = None,
        last_action_was_skip: Optional[bool] = None,
    ) -> CourseSession:
        """
        Apply a partial progress update. Fields left as None are untouched.

        Switching to a course that has settings resets ``total_questions`` and
        draws a fresh question order; an explicit ``total_questions`` in the
        same call still wins.
        """
        session = self.require_session(session_id)

        if course_type is not None:
            session.course_type = course_type
            if self.settings_service.has_settings(course_type):
                settings = self.settings_service.get_course_settings(
                    course_type, session.difficulty or "default"
                )
                session.total_questions = settings.total_questions
                session.randomized_question_order = generate_randomized_question_order(
                    settings.total_questions
                )
        if current_question is not None:
            session.current_question = current_question
        if total_questions is not None:
            session.total_questions = total_questions
        if score is not None:
            session.score = score
        if is_completed is not None:
            session.is_completed = is_completed
        if last_action_was_skip is not None:
            session.last_action_was_skip = last_action_was_skip

        return self.session_repo.save(session)

    def end_course(self, session_id: str) -> CourseSession:
        session = self.require_session(session_id)
        session.is_completed = True
        logger.info(f"Session {session_id} ended by learner")
        return self.session_repo.save(session)

    def get_current_question(self, session_id: str) -> Optional[Question]:
        """Question at the learner's position, or None when the course is over."""
        session = self.session_repo.get_by_session_id(session_id)
        return self.current_question_for(session) if session else None

    @staticmethod
    def current_question_for(session: CourseSession) -> Optional[Question]:
        order = session.randomized_question_order
        if not session.course_type or not order:
            return None
        if session.current_question >= len(order):
            return None
        questions = get_questions_for_course(session.course_type)
        index = order[session.current_question]
        if 0 <= index < len(questions):
            return questions[index]
        return None

    def get_randomized_questions(self, session_id: str) -> list[Question]:
        """Questions in this session's order, limited to its question count."""
        session = self.session_repo.get_by_session_id(session_id)
        if not session or not session.course_type or not session.randomized_question_order:
            return []

        questions = get_questions_for_course(session.course_type)
        limit = session.total_questions or len(questions)
        return [
            questions[index]
            for index in session.randomized_question_order[:limit]
            if 0 <= index < len(questions)
        ]
