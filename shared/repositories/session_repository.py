"""Course session data access layer."""
import logging
from typing import Optional
from sqlalchemy.orm import Session as DBSession
from datetime import datetime

from shared.models.entities import CourseSession, SessionMessage
from shared.utils.message_utils import now_ms, generate_message_id

logger = logging.getLogger(__name__)


class SessionRepository:
    """Repository for session and session-message CRUD operations."""

    def __init__(self, db: DBSession):
        self.db = db

    def create(
        self,
        session_id: str,
        course_type: Optional[str],
        difficulty: str,
        total_questions: int,
        question_order: list[int],
    ) -> CourseSession:
        """
        Create a new session record.

        Args:
            session_id: Client-chosen session identifier
            course_type: Course the learner picked
            difficulty: Settings difficulty key
            total_questions: Number of questions in this run
            question_order: Randomized question-bank indices

        Returns:
            Created CourseSession
        """
        session = CourseSession(
            session_id=session_id,
            course_type=course_type,
            difficulty=difficulty,
            current_question=0,
            total_questions=total_questions,
            score=0,
            is_completed=False,
            is_archived=False,
            created_at=datetime.utcnow(),
            updated_at=datetime.utcnow(),
        )
        session.randomized_question_order = question_order
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        return session

    def get_by_session_id(self, session_id: str) -> Optional[CourseSession]:
        """
        Retrieve session by its client identifier.

        Args:
            session_id: Session identifier

        Returns:
            CourseSession if found, None otherwise
        """
        return (
            self.db.query(CourseSession)
            .filter(CourseSession.session_id == session_id)
            .first()
        )

    def list_recent(self, limit: Optional[int] = None) -> list[CourseSession]:
        """Sessions newest first, optionally limited."""
        query = self.db.query(CourseSession).order_by(
            CourseSession.created_at.desc(), CourseSession.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def list_completed(self) -> list[CourseSession]:
        """All sessions marked completed."""
        return (
            self.db.query(CourseSession)
            .filter(CourseSession.is_completed.is_(True))
            .all()
        )

    def save(self, session: CourseSession) -> CourseSession:
        """Persist pending changes on a session."""
        session.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(session)
        return session

    def delete(self, session: CourseSession) -> None:
        """Delete a session and its messages."""
        self.db.delete(session)
        self.db.commit()

    # ── Messages ────────────────────────────────────────────────

    def append_message(
        self,
        session: CourseSession,
        role: str,
        content: str,
        *,
        is_admin_intervention: bool = False,
        admin_note: Optional[str] = None,
        is_voice_message: bool = False,
        voice_command: Optional[str] = None,
        commit: bool = True,
    ) -> SessionMessage:
        """
        Append a message to the end of a session's transcript.

        Returns:
            The stored SessionMessage
        """
        timestamp = now_ms()
        message = SessionMessage(
            message_id=generate_message_id(session.session_id, timestamp),
            position=len(session.messages),
            role=role,
            content=content,
            timestamp=timestamp,
            is_admin_intervention=is_admin_intervention,
            admin_note=admin_note,
            is_voice_message=is_voice_message,
            voice_command=voice_command,
        )
        session.messages.append(message)
        if commit:
            self.save(session)
        return message

    def remove_message(self, session: CourseSession, index: int) -> SessionMessage:
        """Remove the message at ``index`` and close the gap in positions."""
        message = session.messages.pop(index)
        for position, remaining in enumerate(session.messages):
            remaining.position = position
        self.save(session)
        return message

    def clear_messages(self, session: CourseSession, commit: bool = True) -> None:
        """Drop every message of a session."""
        session.messages.clear()
        if commit:
            self.save(session)
