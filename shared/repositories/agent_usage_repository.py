"""Agent usage event data access layer."""
from typing import Optional
from sqlalchemy.orm import Session as DBSession

from shared.models.entities import AgentUsage
from shared.utils.message_utils import now_ms


class AgentUsageRepository:
    """Repository for agent_usage rows."""

    def __init__(self, db: DBSession):
        self.db = db

    def create(
        self,
        session_id: str,
        input_tokens: int,
        output_tokens: int,
        total_tokens: int,
        response_time_ms: Optional[int] = None,
    ) -> AgentUsage:
        row = AgentUsage(
            session_id=session_id,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=total_tokens,
            response_time_ms=response_time_ms,
            timestamp=now_ms(),
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def get_all(self) -> list[AgentUsage]:
        return self.db.query(AgentUsage).all()

    def get_recent(self, limit: int = 10) -> list[AgentUsage]:
        return (
            self.db.query(AgentUsage)
            .order_by(AgentUsage.timestamp.desc(), AgentUsage.id.desc())
            .limit(limit)
            .all()
        )
