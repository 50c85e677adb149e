from shared.models.entities import (
    Base,
    CourseSession,
    SessionMessage,
    CourseSetting,
    CourseDoc,
    AgentUsage,
)
from shared.models.domain import Question, CourseSettingsValue, ChatMessage, ProgressUpdate

__all__ = [
    "Base",
    "CourseSession",
    "SessionMessage",
    "CourseSetting",
    "CourseDoc",
    "AgentUsage",
    "Question",
    "CourseSettingsValue",
    "ChatMessage",
    "ProgressUpdate",
]
