from shared.repositories.session_repository import SessionRepository
from shared.repositories.course_settings_repository import CourseSettingsRepository
from shared.repositories.course_doc_repository import CourseDocRepository
from shared.repositories.agent_usage_repository import AgentUsageRepository

__all__ = [
    "SessionRepository",
    "CourseSettingsRepository",
    "CourseDocRepository",
    "AgentUsageRepository",
]
