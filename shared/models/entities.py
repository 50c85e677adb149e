"""SQLAlchemy ORM database models."""
import json
from datetime import datetime
from sqlalchemy import Column, String, Integer, BigInteger, Text, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class CourseSession(Base):
    """Session table - one learner's run through a course."""
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String, unique=True, nullable=False)  # Client-generated identifier
    course_type = Column(String, nullable=True)  # "build-apps", "build-apps-cards", "how-convex-works"
    difficulty = Column(String, default="default", nullable=True)
    current_question = Column(Integer, default=0, nullable=False)  # 0-based
    total_questions = Column(Integer, nullable=True)
    score = Column(Integer, default=0, nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    is_archived = Column(Boolean, default=False, nullable=False)
    last_action_was_skip = Column(Boolean, nullable=True)
    question_order_json = Column(Text, nullable=True)  # JSON array of question-bank indices
    agent_thread_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    messages = relationship(
        "SessionMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="SessionMessage.position",
    )

    __table_args__ = (
        Index("idx_session_session_id", "session_id"),
        Index("idx_session_created", "created_at"),
    )

    @property
    def randomized_question_order(self) -> list[int] | None:
        if not self.question_order_json:
            return None
        return json.loads(self.question_order_json)

    @randomized_question_order.setter
    def randomized_question_order(self, order: list[int] | None) -> None:
        self.question_order_json = json.dumps(order) if order is not None else None


class SessionMessage(Base):
    """Chat transcript entry belonging to a session."""
    __tablename__ = "session_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_pk = Column(Integer, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False)
    message_id = Column(String, nullable=True)
    position = Column(Integer, nullable=False)
    role = Column(String, nullable=False)  # user, assistant, system
    content = Column(Text, nullable=False)
    timestamp = Column(BigInteger, nullable=False)  # ms since epoch
    is_admin_intervention = Column(Boolean, default=False, nullable=False)
    admin_note = Column(String, nullable=True)
    is_voice_message = Column(Boolean, default=False, nullable=False)
    voice_command = Column(String, nullable=True)

    session = relationship("CourseSession", back_populates="messages")

    __table_args__ = (
        Index("idx_message_session_position", "session_pk", "position"),
    )


class CourseSetting(Base):
    """Admin-tunable question count and max score per course and difficulty."""
    __tablename__ = "course_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_type = Column(String, nullable=False)
    difficulty = Column(String, nullable=False, default="default")
    total_questions = Column(Integer, nullable=False)
    max_score = Column(Integer, nullable=False)
    updated_by = Column(String, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("idx_course_settings_type_difficulty", "course_type", "difficulty", unique=True),
    )


class CourseDoc(Base):
    """Reference documentation link fed into the agent tutor prompt."""
    __tablename__ = "course_docs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    doc_type = Column(String, unique=True, nullable=False)  # e.g. "queries", "mutations"
    url = Column(String, nullable=False)
    content = Column(Text, nullable=True)
    last_fetched = Column(BigInteger, nullable=False)  # ms since epoch
    is_active = Column(Boolean, default=True, nullable=False)
    updated_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class AgentUsage(Base):
    """Token accounting for agent tutor calls."""
    __tablename__ = "agent_usage"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String, nullable=False)
    input_tokens = Column(Integer, nullable=False, default=0)
    output_tokens = Column(Integer, nullable=False, default=0)
    total_tokens = Column(Integer, nullable=False, default=0)
    response_time_ms = Column(Integer, nullable=True)
    timestamp = Column(BigInteger, nullable=False)  # ms since epoch

    __table_args__ = (
        Index("idx_agent_usage_session", "session_id"),
    )
