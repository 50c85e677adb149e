"""Course settings data access layer."""
import logging
from typing import Optional
from sqlalchemy.orm import Session as DBSession
from datetime import datetime

from shared.models.entities import CourseSetting

logger = logging.getLogger(__name__)


class CourseSettingsRepository:
    """Repository for course_settings CRUD operations."""

    def __init__(self, db: DBSession):
        self.db = db

    def get_all(self) -> list[CourseSetting]:
        """Return all settings rows ordered by course and difficulty."""
        return (
            self.db.query(CourseSetting)
            .order_by(CourseSetting.course_type, CourseSetting.difficulty)
            .all()
        )

    def get(self, course_type: str, difficulty: str = "default") -> Optional[CourseSetting]:
        """Return the row for a course/difficulty pair, or None."""
        return self.db.query(CourseSetting).filter(
            CourseSetting.course_type == course_type,
            CourseSetting.difficulty == difficulty,
        ).first()

    def upsert(
        self,
        course_type: str,
        difficulty: str,
        total_questions: int,
        max_score: int,
        updated_by: Optional[str] = None,
    ) -> CourseSetting:
        """Insert or update a settings row."""
        row = self.get(course_type, difficulty)
        if row:
            row.total_questions = total_questions
            row.max_score = max_score
            row.updated_by = updated_by
            row.updated_at = datetime.utcnow()
        else:
            row = CourseSetting(
                course_type=course_type,
                difficulty=difficulty,
                total_questions=total_questions,
                max_score=max_score,
                updated_by=updated_by,
            )
            self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row
