"""Admin playground API endpoints."""
import logging
import traceback
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session as DBSession

from auth.dependencies import require_admin
from database import get_db
from shared.models.schemas import (
    AdminMessageRequest,
    AdminMessageResponse,
    AdminStats,
    ArchiveRequest,
    BulkArchiveRequest,
    BulkArchiveResult,
    BulkClearResult,
    BulkDeleteResult,
    BulkSessionsRequest,
    ContextualAdminMessage,
    DeleteMessageResponse,
    EditMessageRequest,
    EditMessageResponse,
    ProgressUpdateRequest,
    SessionDetails,
    SessionListItem,
    SessionSummary,
    SessionWithMessages,
    TakeoverRequest,
    TakeoverStatus,
)
from shared.utils.exceptions import CourseTutorException
from admin.services.playground_service import PlaygroundService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/playground",
    tags=["admin-playground"],
    dependencies=[Depends(require_admin)],
)


def _internal_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error {action}: {str(e)}\n{traceback.format_exc()}")
    return HTTPException(status_code=500, detail=f"Error {action}: {str(e)}")


# ─── Listings & monitoring ───────────────────────────────────────────

@router.get("/sessions", response_model=List[SessionSummary])
def list_active_sessions(show_archived: bool = Query(False), db: DBSession = Depends(get_db)):
    """Newest sessions, archived or not."""
    return PlaygroundService(db).get_all_active_sessions(show_archived=show_archived)


@router.get("/sessions/all", response_model=List[SessionListItem])
def list_all_sessions(db: DBSession = Depends(get_db)):
    return PlaygroundService(db).get_all_sessions()


@router.get("/stats", response_model=AdminStats)
def get_admin_stats(db: DBSession = Depends(get_db)):
    """Live dashboard counters."""
    return PlaygroundService(db).get_admin_stats()


# ─── Bulk operations ─────────────────────────────────────────────────

@router.post("/bulk/archive", response_model=BulkArchiveResult)
def bulk_archive(request: BulkArchiveRequest, db: DBSession = Depends(get_db)):
    return PlaygroundService(db).bulk_archive_sessions(request.session_ids, request.archive)


@router.post("/bulk/delete", response_model=BulkDeleteResult)
def bulk_delete(request: BulkSessionsRequest, db: DBSession = Depends(get_db)):
    return PlaygroundService(db).bulk_delete_sessions(request.session_ids)


@router.post("/bulk/clear", response_model=BulkClearResult)
def bulk_clear(request: BulkSessionsRequest, db: DBSession = Depends(get_db)):
    """Wipe transcripts and reset progress."""
    return PlaygroundService(db).bulk_clear_session_messages(request.session_ids)


# ─── Single session ──────────────────────────────────────────────────

@router.get("/sessions/{session_id}", response_model=SessionDetails)
def get_session_details(session_id: str, db: DBSession = Depends(get_db)):
    details = PlaygroundService(db).get_session_details(session_id)
    if details is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return details


@router.get("/sessions/{session_id}/messages", response_model=SessionWithMessages)
def get_session_with_messages(session_id: str, db: DBSession = Depends(get_db)):
    """Session details with its full transcript."""
    details = PlaygroundService(db).get_session_with_messages(session_id)
    if details is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return details


@router.delete("/sessions/{session_id}")
def delete_session(session_id: str, db: DBSession = Depends(get_db)):
    try:
        PlaygroundService(db).delete_session(session_id)
        return {"success": True}
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("deleting session", e)


@router.post("/sessions/{session_id}/archive")
def archive_session(session_id: str, request: ArchiveRequest, db: DBSession = Depends(get_db)):
    try:
        PlaygroundService(db).archive_session(session_id, request.archive)
        return {"success": True}
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("archiving session", e)


@router.get("/sessions/{session_id}/takeover", response_model=TakeoverStatus)
def get_takeover_status(session_id: str, db: DBSession = Depends(get_db)):
    return TakeoverStatus(is_taken_over=PlaygroundService(db).is_session_taken_over(session_id))


@router.post("/sessions/{session_id}/takeover")
def take_over_session(session_id: str, request: TakeoverRequest, db: DBSession = Depends(get_db)):
    """Disable (takeover=true) or re-enable AI replies for a session."""
    try:
        PlaygroundService(db).take_over_session(session_id, request.takeover)
        return {"success": True}
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("changing takeover state", e)


@router.post("/sessions/{session_id}/progress")
def update_session_progress(
    session_id: str,
    request: ProgressUpdateRequest,
    db: DBSession = Depends(get_db),
):
    try:
        PlaygroundService(db).update_session_progress(
            session_id,
            score_adjustment=request.score_adjustment,
            question_jump=request.question_jump,
            mark_completed=request.mark_completed,
        )
        return {"success": True}
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("updating session progress", e)


# ─── Messages ────────────────────────────────────────────────────────

@router.post("/sessions/{session_id}/admin-messages", response_model=AdminMessageResponse)
def insert_admin_message(
    session_id: str,
    request: AdminMessageRequest,
    db: DBSession = Depends(get_db),
):
    """Insert a hint for the learner's current (or a given) card or question."""
    try:
        return PlaygroundService(db).insert_contextual_admin_message(
            session_id,
            request.content,
            admin_note=request.admin_note,
            target_context=request.target_context,
        )
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("inserting admin message", e)


@router.get("/sessions/{session_id}/admin-messages", response_model=List[ContextualAdminMessage])
def get_contextual_admin_messages(
    session_id: str,
    context: str = Query(..., description='e.g. "card_1" or "question_3"'),
    db: DBSession = Depends(get_db),
):
    return PlaygroundService(db).get_contextual_admin_messages(session_id, context)


@router.delete(
    "/sessions/{session_id}/admin-messages/{message_id}",
    response_model=DeleteMessageResponse,
)
def delete_admin_message(session_id: str, message_id: str, db: DBSession = Depends(get_db)):
    try:
        return PlaygroundService(db).delete_admin_message(session_id, message_id)
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("deleting admin message", e)


@router.delete("/sessions/{session_id}/messages/{message_id}", response_model=DeleteMessageResponse)
def delete_any_message(session_id: str, message_id: str, db: DBSession = Depends(get_db)):
    """Delete a tutor or admin message (learner messages are refused)."""
    try:
        return PlaygroundService(db).delete_any_message(session_id, message_id)
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("deleting message", e)


@router.put("/sessions/{session_id}/messages/{message_id}", response_model=EditMessageResponse)
def edit_message(
    session_id: str,
    message_id: str,
    request: EditMessageRequest,
    db: DBSession = Depends(get_db),
):
    try:
        return PlaygroundService(db).edit_message(
            session_id, message_id, request.new_content, admin_note=request.admin_note
        )
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("editing message", e)


@router.put("/sessions/{session_id}/ai-messages/{message_id}")
def edit_ai_message(
    session_id: str,
    message_id: str,
    request: EditMessageRequest,
    db: DBSession = Depends(get_db),
):
    try:
        PlaygroundService(db).edit_ai_message(
            session_id, message_id, request.new_content, admin_note=request.admin_note
        )
        return {"success": True}
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("editing AI message", e)


@router.post("/sessions/{session_id}/admin-message", response_model=AdminMessageResponse)
def insert_admin_message_legacy(
    session_id: str,
    request: AdminMessageRequest,
    db: DBSession = Depends(get_db),
):
    """Older clients: always targets the learner's current item."""
    try:
        return PlaygroundService(db).insert_admin_message(
            session_id, request.content, admin_note=request.admin_note
        )
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("inserting admin message", e)
