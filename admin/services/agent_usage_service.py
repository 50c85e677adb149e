"""Agent tutor bookkeeping: per-session thread ids and token usage analytics."""

import logging
from typing import Optional
from sqlalchemy.orm import Session as DBSession

from shared.models.entities import AgentUsage
from shared.repositories import SessionRepository, AgentUsageRepository
from shared.utils.exceptions import SessionNotFoundException
from shared.utils.message_utils import datetime_to_ms, last_activity_ms
from shared.utils.number_utils import round_half_up

logger = logging.getLogger("admin.agent_usage_service")


class AgentUsageService:
    """Tracks agent-flow enablement and token usage."""

    def __init__(self, db: DBSession):
        self.db = db
        self.session_repo = SessionRepository(db)
        self.usage_repo = AgentUsageRepository(db)

    def get_agent_flow_status(self, session_id: str) -> dict:
        session = self.session_repo.get_by_session_id(session_id)
        if not session:
            return {"is_enabled": False, "thread_id": None, "last_activity": None}
        return {
            "is_enabled": bool(session.agent_thread_id),
            "thread_id": session.agent_thread_id,
            "last_activity": last_activity_ms(session.messages, datetime_to_ms(session.created_at)),
        }

    def initialize_agent_flow(self, session_id: str, thread_id: str) -> dict:
        session = self.session_repo.get_by_session_id(session_id)
        if not session:
            raise SessionNotFoundException(session_id)
        session.agent_thread_id = thread_id
        self.session_repo.save(session)
        logger.info(f"Agent flow initialized for session {session_id} (thread {thread_id})")
        return {"success": True, "thread_id": thread_id}

    def track_usage(
        self,
        session_id: str,
        input_tokens: int,
        output_tokens: int,
        total_tokens: int,
        response_time_ms: Optional[int] = None,
    ) -> AgentUsage:
        return self.usage_repo.create(
            session_id=session_id,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=total_tokens,
            response_time_ms=response_time_ms,
        )

    def get_analytics(self) -> dict:
        """Unique sessions, rounded average tokens and the ten latest calls."""
        rows = self.usage_repo.get_all()
        if not rows:
            return {
                "total_sessions": 0,
                "average_token_usage": 0,
                "success_rate": 0,
                "recent_activity": [],
            }

        total_sessions = len({row.session_id for row in rows})
        average_tokens = int(round_half_up(sum(row.total_tokens for row in rows) / len(rows)))

        return {
            "total_sessions": total_sessions,
            "average_token_usage": average_tokens,
            "success_rate": 100,
            "recent_activity": [
                {
                    "session_id": row.session_id,
                    "timestamp": row.timestamp,
                    "token_usage": row.total_tokens,
                }
                for row in self.usage_repo.get_recent(10)
            ],
        }
