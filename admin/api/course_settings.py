"""Course settings and documentation link API endpoints."""
import logging
import traceback
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session as DBSession

from auth.dependencies import require_admin
from database import get_db
from shared.models.entities import CourseDoc
from shared.models.schemas import (
    CourseDocResponse,
    CourseSettingsValue,
    InitializeRequest,
    RefreshAllResult,
    RefreshDocRequest,
    UpdateCourseSettingsRequest,
    UpsertCourseDocRequest,
)
from shared.utils.exceptions import CourseTutorException
from admin.services.course_docs_service import CourseDocsService
from admin.services.course_settings_service import CourseSettingsService

logger = logging.getLogger(__name__)

settings_router = APIRouter(
    prefix="/admin/course-settings",
    tags=["admin-course-settings"],
    dependencies=[Depends(require_admin)],
)
docs_router = APIRouter(
    prefix="/admin/course-docs",
    tags=["admin-course-docs"],
    dependencies=[Depends(require_admin)],
)
public_router = APIRouter(prefix="/course-settings", tags=["course-settings"])


def _doc_response(doc: CourseDoc) -> CourseDocResponse:
    return CourseDocResponse(
        doc_type=doc.doc_type,
        url=doc.url,
        content=doc.content,
        last_fetched=doc.last_fetched,
        is_active=doc.is_active,
        updated_by=doc.updated_by,
    )


def _internal_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error {action}: {str(e)}\n{traceback.format_exc()}")
    return HTTPException(status_code=500, detail=f"Error {action}: {str(e)}")


# ─── Public ──────────────────────────────────────────────────────────

@public_router.get("/{course_type}", response_model=CourseSettingsValue)
def get_course_settings(
    course_type: str,
    difficulty: str = Query("default"),
    db: DBSession = Depends(get_db),
):
    """Effective settings for a course; built-in defaults when none are stored."""
    return CourseSettingsService(db).get_course_settings(course_type, difficulty)


# ─── Course settings (admin) ─────────────────────────────────────────

@settings_router.get("", response_model=List[CourseSettingsValue])
def list_course_settings(db: DBSession = Depends(get_db)):
    return CourseSettingsService(db).get_all_course_settings()


@settings_router.put("", response_model=CourseSettingsValue)
def update_course_settings(request: UpdateCourseSettingsRequest, db: DBSession = Depends(get_db)):
    try:
        return CourseSettingsService(db).update_course_settings(
            course_type=request.course_type,
            total_questions=request.total_questions,
            max_score=request.max_score,
            difficulty=request.difficulty,
            updated_by=request.updated_by,
        )
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("updating course settings", e)


@settings_router.post("/initialize", response_model=List[CourseSettingsValue])
def initialize_course_settings(request: InitializeRequest, db: DBSession = Depends(get_db)):
    """Seed default settings for built-in courses; returns the rows created."""
    return CourseSettingsService(db).initialize_course_settings(request.updated_by)


# ─── Documentation links (admin) ─────────────────────────────────────

@docs_router.get("", response_model=List[CourseDocResponse])
def list_course_docs(db: DBSession = Depends(get_db)):
    return [_doc_response(doc) for doc in CourseDocsService(db).get_course_docs()]


@docs_router.put("", response_model=CourseDocResponse)
def upsert_course_doc(request: UpsertCourseDocRequest, db: DBSession = Depends(get_db)):
    """Create or update a documentation link keyed by doc_type."""
    doc = CourseDocsService(db).upsert_course_doc(
        doc_type=request.doc_type,
        url=request.url,
        content=request.content,
        is_active=request.is_active,
        updated_by=request.updated_by,
    )
    return _doc_response(doc)


@docs_router.post("/initialize", response_model=List[CourseDocResponse])
def initialize_course_docs(request: InitializeRequest, db: DBSession = Depends(get_db)):
    return [_doc_response(doc) for doc in CourseDocsService(db).initialize_course_docs(request.updated_by)]


@docs_router.post("/refresh-all", response_model=RefreshAllResult)
def refresh_all_docs(request: InitializeRequest, db: DBSession = Depends(get_db)):
    """Re-fetch every active doc; failures are reported, not raised."""
    return CourseDocsService(db).refresh_all_active_docs(request.updated_by)


@docs_router.delete("/{doc_type}")
def delete_course_doc(doc_type: str, db: DBSession = Depends(get_db)):
    try:
        CourseDocsService(db).delete_course_doc(doc_type)
        return {"success": True}
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("deleting documentation link", e)


@docs_router.post("/{doc_type}/refresh", response_model=CourseDocResponse)
def refresh_doc(doc_type: str, request: RefreshDocRequest, db: DBSession = Depends(get_db)):
    """Bump the fetch timestamp without downloading."""
    try:
        doc = CourseDocsService(db).refresh_doc_content(doc_type, request.url, request.updated_by)
        return _doc_response(doc)
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("refreshing documentation link", e)


@docs_router.post("/{doc_type}/fetch", response_model=CourseDocResponse)
def fetch_doc(doc_type: str, request: RefreshDocRequest, db: DBSession = Depends(get_db)):
    """Download the page and store its text."""
    try:
        doc = CourseDocsService(db).fetch_and_update_doc_content(
            doc_type, request.url, request.updated_by
        )
        return _doc_response(doc)
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("fetching documentation", e)
