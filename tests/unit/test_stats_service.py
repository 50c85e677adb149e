"""Unit tests for admin/services/stats_service.py and admin/services/agent_usage_service.py"""

import pytest

from shared.repositories import SessionRepository
from shared.utils.exceptions import SessionNotFoundException
from admin.services.agent_usage_service import AgentUsageService
from admin.services.stats_service import StatsService


@pytest.fixture
def make_session(db_session, session_factory):
    def _make(session_id, course_type="build-apps", score=0, current_question=0,
              completed=False, skipped=None):
        session = session_factory(session_id, course_type=course_type)
        session.score = score
        session.current_question = current_question
        session.is_completed = completed
        session.last_action_was_skip = skipped
        return SessionRepository(db_session).save(session)

    return _make


# ===========================================================================
# Overall stats
# ===========================================================================

class TestOverallStats:
    def test_empty(self, db_session):
        stats = StatsService(db_session).get_overall_stats()

        assert stats["total_sessions_started"] == 0
        assert stats["total_sessions_completed"] == 0
        assert stats["completion_rate"] == 0
        assert stats["average_score"] == 0
        assert stats["incorrect_answers_estimate"] == 0

    def test_aggregates(self, db_session, make_session):
        make_session("a", "build-apps", score=70, current_question=7, completed=True)
        make_session("b", "build-apps-cards", score=45, current_question=7, completed=True, skipped=True)
        make_session("c", "how-convex-works", score=10, current_question=2)

        stats = StatsService(db_session).get_overall_stats()

        assert stats["total_sessions_started"] == 3
        assert stats["total_sessions_completed"] == 2
        assert stats["average_score"] == 57.5
        assert stats["total_questions_answered"] == 14
        assert stats["course_breakdown"] == {"chat_mode": 1, "cards_mode": 1, "how_convex_works": 0}
        assert stats["average_score_by_mode"]["chat_mode"] == 70
        assert stats["average_score_by_mode"]["how_convex_works"] == 0
        assert stats["completion_rate"] == pytest.approx(66.67)
        assert stats["total_skipped_questions"] == 1
        # round(115 / 10) with halves rounding up
        assert stats["correct_answers_estimate"] == 12
        assert stats["incorrect_answers_estimate"] == 14 - 12 - 1


class TestRecentAndDistribution:
    def test_recent_activity_limit(self, db_session, make_session):
        for i in range(25):
            make_session(f"s{i}")

        recent = StatsService(db_session).get_recent_activity()
        assert len(recent) == 20
        assert recent[0]["session_id"] == "s24"

    def test_score_distribution(self, db_session, make_session):
        make_session("a", score=0, completed=True)
        make_session("b", score=20, completed=True)
        make_session("c", score=21, completed=True)
        make_session("d", score=100, completed=True)
        make_session("e", score=55)

        buckets = StatsService(db_session).get_score_distribution()

        assert buckets == [
            {"score_range": "0-20", "count": 2},
            {"score_range": "21-40", "count": 1},
            {"score_range": "41-60", "count": 0},
            {"score_range": "61-80", "count": 0},
            {"score_range": "81-100", "count": 1},
        ]


# ===========================================================================
# Agent usage
# ===========================================================================

class TestAgentUsage:
    def test_status_unknown_session(self, db_session):
        assert AgentUsageService(db_session).get_agent_flow_status("nope") == {
            "is_enabled": False,
            "thread_id": None,
            "last_activity": None,
        }

    def test_initialize_and_status(self, db_session, session_factory):
        session_factory()
        service = AgentUsageService(db_session)

        assert service.initialize_agent_flow("sess-1", "thread-9") == {
            "success": True,
            "thread_id": "thread-9",
        }
        status = service.get_agent_flow_status("sess-1")
        assert status["is_enabled"] is True
        assert status["thread_id"] == "thread-9"
        assert status["last_activity"] > 0

    def test_initialize_missing_session(self, db_session):
        with pytest.raises(SessionNotFoundException):
            AgentUsageService(db_session).initialize_agent_flow("nope", "t")

    def test_analytics_empty(self, db_session):
        assert AgentUsageService(db_session).get_analytics() == {
            "total_sessions": 0,
            "average_token_usage": 0,
            "success_rate": 0,
            "recent_activity": [],
        }

    def test_analytics(self, db_session):
        service = AgentUsageService(db_session)
        service.track_usage("a", 10, 5, 15)
        service.track_usage("a", 10, 10, 20)
        service.track_usage("b", 1, 1, 2)

        analytics = service.get_analytics()

        assert analytics["total_sessions"] == 2
        # 37 / 3 = 12.33
        assert analytics["average_token_usage"] == 12
        assert analytics["success_rate"] == 100
        assert len(analytics["recent_activity"]) == 3
        newest = analytics["recent_activity"][0]
        assert newest["session_id"] == "b"
        assert newest["token_usage"] == 2
