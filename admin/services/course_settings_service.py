"""Course settings: question count and max score per course and difficulty."""

import logging
from typing import Optional
from sqlalchemy.orm import Session as DBSession

from shared.models.domain import CourseSettingsValue
from shared.models.entities import CourseSetting
from shared.repositories import CourseSettingsRepository
from shared.utils.exceptions import InvalidSettingsException

logger = logging.getLogger("admin.course_settings_service")

# (total_questions, max_score)
DEFAULT_COURSE_SETTINGS: dict[str, tuple[int, int]] = {
    "how-convex-works": (10, 100),
    "build-apps": (7, 100),
    "build-apps-cards": (7, 100),
}
FALLBACK_SETTINGS = (10, 100)

MIN_TOTAL_QUESTIONS, MAX_TOTAL_QUESTIONS = 1, 50
MIN_MAX_SCORE, MAX_MAX_SCORE = 10, 1000


def default_settings(course_type: str, difficulty: str = "default") -> CourseSettingsValue:
    total_questions, max_score = DEFAULT_COURSE_SETTINGS.get(course_type, FALLBACK_SETTINGS)
    return CourseSettingsValue(
        course_type=course_type,
        difficulty=difficulty,
        total_questions=total_questions,
        max_score=max_score,
        is_default=True,
    )


def _to_value(row: CourseSetting) -> CourseSettingsValue:
    return CourseSettingsValue(
        course_type=row.course_type,
        difficulty=row.difficulty,
        total_questions=row.total_questions,
        max_score=row.max_score,
        updated_by=row.updated_by,
    )


class CourseSettingsService:
    """Reads and edits admin-tunable course settings."""

    def __init__(self, db: DBSession):
        self.db = db
        self.repo = CourseSettingsRepository(db)

    def get_course_settings(self, course_type: str, difficulty: str = "default") -> CourseSettingsValue:
        """Stored settings for the pair, else the built-in defaults."""
        row = self.repo.get(course_type, difficulty)
        if row:
            return _to_value(row)
        return default_settings(course_type, difficulty)

    def has_settings(self, course_type: str) -> bool:
        """True for built-in course types and any course with a stored row."""
        if course_type in DEFAULT_COURSE_SETTINGS:
            return True
        return self.repo.get(course_type) is not None

    def get_all_course_settings(self) -> list[CourseSettingsValue]:
        return [_to_value(row) for row in self.repo.get_all()]

    def update_course_settings(
        self,
        course_type: str,
        total_questions: int,
        max_score: int,
        difficulty: str = "default",
        updated_by: Optional[str] = None,
    ) -> CourseSettingsValue:
        """
        Upsert settings for a course/difficulty pair.

        Raises:
            InvalidSettingsException: If a value is outside its allowed range
        """
        if not course_type:
            raise InvalidSettingsException("course_type", "must not be empty")
        if not MIN_TOTAL_QUESTIONS <= total_questions <= MAX_TOTAL_QUESTIONS:
            raise InvalidSettingsException(
                "total_questions",
                f"must be between {MIN_TOTAL_QUESTIONS} and {MAX_TOTAL_QUESTIONS}",
            )
        if not MIN_MAX_SCORE <= max_score <= MAX_MAX_SCORE:
            raise InvalidSettingsException(
                "max_score",
                f"must be between {MIN_MAX_SCORE} and {MAX_MAX_SCORE}",
            )

        row = self.repo.upsert(
            course_type=course_type,
            difficulty=difficulty,
            total_questions=total_questions,
            max_score=max_score,
            updated_by=updated_by,
        )
        logger.info(
            f"Course settings updated: {course_type}/{difficulty} -> "
            f"{total_questions} questions, max score {max_score} (by {updated_by})"
        )
        return _to_value(row)

    def initialize_course_settings(self, updated_by: str = "admin") -> list[CourseSettingsValue]:
        """Seed the default-difficulty rows for built-in courses that have none yet."""
        created = []
        for course_type, (total_questions, max_score) in DEFAULT_COURSE_SETTINGS.items():
            if self.repo.get(course_type, "default"):
                continue
            row = self.repo.upsert(course_type, "default", total_questions, max_score, updated_by)
            created.append(_to_value(row))
        if created:
            logger.info(f"Initialized {len(created)} course settings rows")
        return created
