"""Admin statistics API endpoints."""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DBSession

from auth.dependencies import require_admin
from database import get_db
from shared.models.schemas import (
    AgentFlowAnalytics,
    OverallStats,
    RecentSession,
    ScoreBucket,
    TrackUsageRequest,
)
from admin.services.agent_usage_service import AgentUsageService
from admin.services.stats_service import StatsService

router = APIRouter(
    prefix="/admin/stats",
    tags=["admin-stats"],
    dependencies=[Depends(require_admin)],
)


@router.get("/overall", response_model=OverallStats)
def get_overall_stats(db: DBSession = Depends(get_db)):
    """Completion, score and answer estimates across all sessions."""
    return StatsService(db).get_overall_stats()


@router.get("/recent", response_model=List[RecentSession])
def get_recent_activity(db: DBSession = Depends(get_db)):
    return StatsService(db).get_recent_activity()


@router.get("/score-distribution", response_model=List[ScoreBucket])
def get_score_distribution(db: DBSession = Depends(get_db)):
    return StatsService(db).get_score_distribution()


@router.get("/agent-flow", response_model=AgentFlowAnalytics)
def get_agent_flow_analytics(db: DBSession = Depends(get_db)):
    """Token usage of the agent tutor."""
    return AgentUsageService(db).get_analytics()


@router.post("/agent-flow/usage")
def track_agent_flow_usage(request: TrackUsageRequest, db: DBSession = Depends(get_db)):
    """Record token usage reported by an external agent runner."""
    AgentUsageService(db).track_usage(
        session_id=request.session_id,
        input_tokens=request.input_tokens,
        output_tokens=request.output_tokens,
        total_tokens=request.total_tokens,
        response_time_ms=request.response_time,
    )
    return {"success": True}
