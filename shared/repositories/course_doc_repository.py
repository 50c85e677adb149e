"""Course documentation link data access layer."""
from typing import Optional
from sqlalchemy.orm import Session as DBSession

from shared.models.entities import CourseDoc
from shared.utils.message_utils import now_ms


class CourseDocRepository:
    """Repository for course_docs CRUD operations."""

    def __init__(self, db: DBSession):
        self.db = db

    def get_all(self) -> list[CourseDoc]:
        return self.db.query(CourseDoc).order_by(CourseDoc.doc_type).all()

    def get_active(self) -> list[CourseDoc]:
        return (
            self.db.query(CourseDoc)
            .filter(CourseDoc.is_active.is_(True))
            .order_by(CourseDoc.doc_type)
            .all()
        )

    def get_by_type(self, doc_type: str) -> Optional[CourseDoc]:
        return self.db.query(CourseDoc).filter(CourseDoc.doc_type == doc_type).first()

    def upsert(
        self,
        doc_type: str,
        url: str,
        content: Optional[str],
        is_active: bool,
        updated_by: Optional[str] = None,
    ) -> CourseDoc:
        """Insert or update a doc row keyed by doc_type."""
        row = self.get_by_type(doc_type)
        if row:
            row.url = url
            if content is not None:
                row.content = content
            row.is_active = is_active
            row.updated_by = updated_by
            row.last_fetched = now_ms()
        else:
            row = CourseDoc(
                doc_type=doc_type,
                url=url,
                content=content or "",
                is_active=is_active,
                updated_by=updated_by,
                last_fetched=now_ms(),
            )
            self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def delete(self, row: CourseDoc) -> None:
        self.db.delete(row)
        self.db.commit()

    def save(self, row: CourseDoc) -> CourseDoc:
        self.db.commit()
        self.db.refresh(row)
        return row
