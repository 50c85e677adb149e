"""
Admin playground: live session monitoring and intervention.

Admins can read any transcript, inject hints tied to the learner's current
card or question, edit or delete tutor messages, take a session over from
the AI, adjust progress and archive, delete or reset sessions in bulk.
"""

import logging
import re
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from shared.models.entities import CourseSession, SessionMessage
from shared.repositories import SessionRepository
from shared.utils.exceptions import (
    MessageNotEditableException,
    MessageNotFoundException,
    SessionNotFoundException,
)
from shared.utils.message_utils import (
    datetime_to_ms,
    effective_message_id,
    find_message_index,
    last_activity_ms,
    message_to_dict,
    now_ms,
    preview,
)
from shared.utils.number_utils import round_half_up
from admin.services.takeover import (
    is_taken_over,
    RESTORE_MESSAGE,
    RESTORE_NOTE,
    TAKEOVER_MESSAGE,
    TAKEOVER_NOTE,
)

logger = logging.getLogger("admin.playground_service")

CARDS_COURSE = "build-apps-cards"
ACTIVE_SESSION_LIMIT = 100
ACTIVE_WINDOW_MS = 60 * 60 * 1000
RECENT_ACTIVITY_LIMIT = 10

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _leading_int(text: str) -> Optional[int]:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


class PlaygroundService:
    """Admin views and interventions over learner sessions."""

    def __init__(self, db: DBSession):
        self.db = db
        self.session_repo = SessionRepository(db)

    # ─── Views ────────────────────────────────────────────────────────

    def get_all_active_sessions(self, show_archived: bool = False) -> list[dict]:
        """Summaries of the newest sessions, either archived or not."""
        sessions = self.session_repo.list_recent(limit=ACTIVE_SESSION_LIMIT)
        return [
            self._summary(session)
            for session in sessions
            if bool(session.is_archived) == show_archived
        ]

    def get_all_sessions(self) -> list[dict]:
        return [
            {
                "session_id": session.session_id,
                "course_type": session.course_type,
                "difficulty": session.difficulty,
                "current_question": session.current_question,
                "total_questions": session.total_questions,
                "score": session.score,
                "is_completed": session.is_completed,
                "is_archived": bool(session.is_archived),
                "created_at": datetime_to_ms(session.created_at),
                "last_action_was_skip": session.last_action_was_skip,
                "is_taken_over": is_taken_over(session.messages),
            }
            for session in self.session_repo.list_recent()
        ]

    def get_session_details(self, session_id: str) -> Optional[dict]:
        session = self.session_repo.get_by_session_id(session_id)
        if not session:
            return None
        return self._details(session)

    def get_session_with_messages(self, session_id: str) -> Optional[dict]:
        """Details plus the full transcript and the learner's current card/question."""
        session = self.session_repo.get_by_session_id(session_id)
        if not session:
            return None

        details = self._details(session)
        label = "card" if session.course_type == CARDS_COURSE else "question"
        details.update({
            "is_taken_over": details["can_restore"],
            "current_context": f"{label} {session.current_question + 1}",
            "messages": [
                message_to_dict(session.session_id, index, message)
                for index, message in enumerate(session.messages)
            ],
        })
        return details

    def is_session_taken_over(self, session_id: str) -> bool:
        session = self.session_repo.get_by_session_id(session_id)
        if not session:
            return False
        return is_taken_over(session.messages)

    def get_contextual_admin_messages(self, session_id: str, context: str) -> list[dict]:
        """
        Admin messages relevant to a card or question context such as ``card_3``.

        Matches messages that mention the context (underscore read as a space)
        or that contain "hint" or "guidance".
        """
        session = self.session_repo.get_by_session_id(session_id)
        if not session:
            return []

        needle = context.lower().replace("_", " ", 1)
        results = []
        for index, message in enumerate(session.messages):
            if not message.is_admin_intervention:
                continue
            content = message.content.lower()
            if needle in content or "hint" in content or "guidance" in content:
                results.append({
                    "message_id": effective_message_id(session.session_id, index, message),
                    "content": message.content,
                    "admin_note": message.admin_note,
                    "timestamp": message.timestamp,
                })
        return results

    # ─── Admin messages ───────────────────────────────────────────────

    def insert_contextual_admin_message(
        self,
        session_id: str,
        content: str,
        admin_note: Optional[str] = None,
        target_context: Optional[str] = None,
    ) -> dict:
        """
        Append an admin hint tied to a card or question.

        ``target_context`` is "current" (the default), "card_N" or
        "question_N"; an unparseable number targets the learner's next item.

        Returns:
            {"message_id": ..., "context": "Card N" | "Question N"}
        """
        session = self._require_session(session_id)
        is_cards = session.course_type == CARDS_COURSE
        prefix = "card_" if is_cards else "question_"
        label = "Card" if is_cards else "Question"
        fallback = session.current_question + 1

        if not target_context or target_context == "current":
            target = fallback
        else:
            target = _leading_int(target_context.replace(prefix, "", 1)) or fallback

        message_context = f"{label} {target}"
        if f"{label.lower()} {target}" not in content.lower():
            suffix = "hint" if is_cards else "guidance"
            content = f"💡 {label} {target} {suffix}: {content}"

        message = self.session_repo.append_message(
            session,
            "assistant",
            content,
            is_admin_intervention=True,
            admin_note=admin_note or f"Admin hint for {message_context}",
        )
        logger.info(f"Admin message inserted into {session_id} for {message_context}")
        return {"message_id": message.message_id, "context": message_context}

    def insert_admin_message(
        self,
        session_id: str,
        content: str,
        admin_note: Optional[str] = None,
    ) -> dict:
        """Legacy entry point; always targets the learner's current item."""
        return self.insert_contextual_admin_message(
            session_id, content, admin_note=admin_note, target_context="current"
        )

    def delete_admin_message(self, session_id: str, message_id: str) -> dict:
        session = self._require_session(session_id)
        index = find_message_index(session.session_id, session.messages, message_id)
        if index is None or not session.messages[index].is_admin_intervention:
            raise MessageNotFoundException(session_id, message_id, admin_only=True)

        deleted = self.session_repo.remove_message(session, index)
        return {"success": True, "deleted_content": preview(deleted.content)}

    def delete_any_message(self, session_id: str, message_id: str) -> dict:
        """Delete a tutor or admin message. Learner messages are refused."""
        session = self._require_session(session_id)
        index = self._find_message(session, message_id)
        if session.messages[index].role == "user":
            raise MessageNotEditableException("delete")

        deleted = self.session_repo.remove_message(session, index)
        return {
            "success": True,
            "deleted_content": preview(deleted.content),
            "message_type": "admin" if deleted.is_admin_intervention else "ai",
        }

    def edit_message(
        self,
        session_id: str,
        message_id: str,
        new_content: str,
        admin_note: Optional[str] = None,
    ) -> dict:
        session = self._require_session(session_id)
        index = self._find_message(session, message_id)
        message = session.messages[index]
        if message.role == "user":
            raise MessageNotEditableException("edit")

        original = message.content
        self._apply_edit(
            session, message, new_content,
            admin_note or f"Admin edit: {datetime.now().strftime('%H:%M:%S')}",
        )
        return {"success": True, "original_content": preview(original)}

    def edit_ai_message(
        self,
        session_id: str,
        message_id: str,
        new_content: str,
        admin_note: Optional[str] = None,
    ) -> None:
        session = self._require_session(session_id)
        index = self._find_message(session, message_id)
        message = session.messages[index]
        if message.role == "user":
            raise MessageNotEditableException("edit")
        self._apply_edit(session, message, new_content, admin_note or "Edited by admin")

    # ─── Session control ──────────────────────────────────────────────

    def take_over_session(self, session_id: str, takeover: bool) -> None:
        """Stop (or resume) AI replies by appending a takeover/restore marker."""
        session = self._require_session(session_id)
        self.session_repo.append_message(
            session,
            "system",
            TAKEOVER_MESSAGE if takeover else RESTORE_MESSAGE,
            is_admin_intervention=True,
            admin_note=TAKEOVER_NOTE if takeover else RESTORE_NOTE,
        )
        logger.info(f"Session {session_id} {'taken over by admin' if takeover else 'returned to AI'}")

    def update_session_progress(
        self,
        session_id: str,
        score_adjustment: Optional[int] = None,
        question_jump: Optional[int] = None,
        mark_completed: Optional[bool] = None,
    ) -> None:
        """
        Manually adjust progress. Score and question never go below zero.

        Any change is recorded in the transcript as a system admin message.
        """
        session = self._require_session(session_id)
        changed = []

        if score_adjustment is not None:
            session.score = max(0, session.score + score_adjustment)
            changed.append("score")
        if question_jump is not None:
            session.current_question = max(0, question_jump)
            changed.append("current_question")
        if mark_completed is not None:
            session.is_completed = mark_completed
            changed.append("is_completed")

        if not changed:
            return
        self.session_repo.append_message(
            session,
            "system",
            f"⚙️ Admin updated session: {', '.join(changed)}",
            is_admin_intervention=True,
            admin_note="Progress adjustment by admin",
        )

    def archive_session(self, session_id: str, archive: bool) -> None:
        session = self._require_session(session_id)
        session.is_archived = archive
        self.session_repo.save(session)

    def delete_session(self, session_id: str) -> None:
        session = self._require_session(session_id)
        self.session_repo.delete(session)
        logger.info(f"Session {session_id} deleted by admin")

    # ─── Bulk operations ──────────────────────────────────────────────

    def bulk_archive_sessions(self, session_ids: list[str], archive: bool) -> dict:
        def _archive(session: CourseSession) -> None:
            session.is_archived = archive
            self.session_repo.save(session)

        processed, errors = self._for_each_session(session_ids, _archive, "archiving")
        return {"processed": processed, "errors": errors}

    def bulk_delete_sessions(self, session_ids: list[str]) -> dict:
        deleted, errors = self._for_each_session(session_ids, self.session_repo.delete, "deleting")
        return {"deleted": deleted, "errors": errors}

    def bulk_clear_session_messages(self, session_ids: list[str]) -> dict:
        """Wipe transcripts and reset question, score and completion."""
        def _clear(session: CourseSession) -> None:
            self.session_repo.clear_messages(session, commit=False)
            session.current_question = 0
            session.score = 0
            session.is_completed = False
            self.session_repo.save(session)

        cleared, errors = self._for_each_session(session_ids, _clear, "clearing")
        return {"cleared": cleared, "errors": errors}

    # ─── Monitoring ───────────────────────────────────────────────────

    def get_admin_stats(self) -> dict:
        """Dashboard counters over non-archived sessions."""
        sessions = self.session_repo.list_recent()
        live = [s for s in sessions if not s.is_archived]
        archived_count = len(sessions) - len(live)
        one_hour_ago = now_ms() - ACTIVE_WINDOW_MS

        active = [
            s for s in live
            if not s.is_completed
            and last_activity_ms(s.messages, datetime_to_ms(s.created_at)) > one_hour_ago
        ]
        completed = [s for s in live if s.is_completed]
        with_intervention = [
            s for s in live if any(m.is_admin_intervention for m in s.messages)
        ]
        average_score = sum(s.score for s in live) / len(live) if live else 0

        recent = sorted(
            (
                {
                    "session_id": s.session_id,
                    "course_type": s.course_type,
                    "last_message": preview(s.messages[-1].content, 100),
                    "timestamp": max(m.timestamp for m in s.messages),
                }
                for s in live
                if s.messages
            ),
            key=lambda item: item["timestamp"],
            reverse=True,
        )[:RECENT_ACTIVITY_LIMIT]

        return {
            "total_sessions": len(live),
            "active_sessions": len(active),
            "completed_sessions": len(completed),
            "archived_sessions": archived_count,
            "average_score": round_half_up(average_score, 1),
            "sessions_with_intervention": len(with_intervention),
            "recent_activity": recent,
        }

    # ─── Helpers ──────────────────────────────────────────────────────

    def _require_session(self, session_id: str) -> CourseSession:
        session = self.session_repo.get_by_session_id(session_id)
        if not session:
            raise SessionNotFoundException(session_id)
        return session

    @staticmethod
    def _find_message(session: CourseSession, message_id: str) -> int:
        index = find_message_index(session.session_id, session.messages, message_id)
        if index is None:
            raise MessageNotFoundException(session.session_id, message_id)
        return index

    def _apply_edit(
        self,
        session: CourseSession,
        message: SessionMessage,
        new_content: str,
        admin_note: str,
    ) -> None:
        message.content = new_content
        message.is_admin_intervention = True
        message.admin_note = admin_note
        self.session_repo.save(session)
        logger.info(f"Message {message.message_id} in {session.session_id} edited by admin")

    def _summary(self, session: CourseSession) -> dict:
        return {
            "session_id": session.session_id,
            "course_type": session.course_type,
            "current_question": session.current_question,
            "total_questions": session.total_questions,
            "score": session.score,
            "is_completed": session.is_completed,
            "is_archived": bool(session.is_archived),
            "last_activity": last_activity_ms(session.messages, datetime_to_ms(session.created_at)),
            "message_count": len(session.messages),
            "has_admin_intervention": any(m.is_admin_intervention for m in session.messages),
            "is_taken_over": is_taken_over(session.messages),
        }

    def _details(self, session: CourseSession) -> dict:
        taken_over = is_taken_over(session.messages)
        created_ms = datetime_to_ms(session.created_at)
        return {
            "session_id": session.session_id,
            "course_type": session.course_type or "unknown",
            "current_question": session.current_question,
            "total_questions": session.total_questions or 0,
            "score": session.score,
            "is_completed": session.is_completed,
            "created_at": created_ms,
            "last_activity": last_activity_ms(session.messages, created_ms),
            "message_count": len(session.messages),
            "has_admin_intervention": any(m.is_admin_intervention for m in session.messages),
            "can_take_over": not taken_over,
            "can_restore": taken_over,
        }

    def _for_each_session(self, session_ids: list[str], action, verb: str) -> tuple[int, int]:
        """Run ``action`` per session; missing ids and DB failures count as errors."""
        done = errors = 0
        for session_id in session_ids:
            session = self.session_repo.get_by_session_id(session_id)
            if not session:
                errors += 1
                continue
            try:
                action(session)
                done += 1
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error {verb} session {session_id}: {e}")
                errors += 1
        return done, errors
