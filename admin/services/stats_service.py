"""Aggregate learner statistics for the stats dashboard."""

import logging
from sqlalchemy.orm import Session as DBSession

from shared.repositories import SessionRepository
from shared.utils.message_utils import datetime_to_ms
from shared.utils.number_utils import round_half_up

logger = logging.getLogger("admin.stats_service")

MODE_COURSES = {
    "chat_mode": "build-apps",
    "cards_mode": "build-apps-cards",
    "how_convex_works": "how-convex-works",
}
SCORE_BUCKETS = [("0-20", 20), ("21-40", 40), ("41-60", 60), ("61-80", 80), ("81-100", None)]
RECENT_SESSION_LIMIT = 20
POINTS_PER_CORRECT_ANSWER = 10


def _average(values: list[int]) -> float:
    return sum(values) / len(values) if values else 0


class StatsService:
    """Read-only statistics over all sessions."""

    def __init__(self, db: DBSession):
        self.db = db
        self.session_repo = SessionRepository(db)

    def get_overall_stats(self) -> dict:
        """
        Completion, score and answer estimates across all sessions.

        Averages cover completed sessions only. Correct answers are estimated
        at ten points each; incorrect answers are whatever remains of the
        answered questions after correct and skipped ones.
        """
        all_sessions = self.session_repo.list_recent()
        completed = [s for s in all_sessions if s.is_completed]

        total_score = sum(s.score or 0 for s in completed)
        total_answered = sum(s.current_question or 0 for s in completed)
        skipped = sum(1 for s in all_sessions if s.last_action_was_skip)
        correct = int(round_half_up(total_score / POINTS_PER_CORRECT_ANSWER))
        completion_rate = len(completed) / len(all_sessions) * 100 if all_sessions else 0

        by_mode = {
            key: [s.score or 0 for s in completed if s.course_type == course]
            for key, course in MODE_COURSES.items()
        }

        return {
            "total_sessions_completed": len(completed),
            "total_sessions_started": len(all_sessions),
            "average_score": round_half_up(_average([s.score or 0 for s in completed]), 2),
            "total_questions_answered": total_answered,
            "course_breakdown": {key: len(scores) for key, scores in by_mode.items()},
            "average_score_by_mode": {
                key: round_half_up(_average(scores), 2) for key, scores in by_mode.items()
            },
            "completion_rate": round_half_up(completion_rate, 2),
            "total_skipped_questions": skipped,
            "correct_answers_estimate": correct,
            "incorrect_answers_estimate": max(0, total_answered - correct - skipped),
        }

    def get_recent_activity(self) -> list[dict]:
        return [
            {
                "session_id": s.session_id,
                "created_at": datetime_to_ms(s.created_at),
                "score": s.score,
                "course_type": s.course_type,
                "is_completed": s.is_completed,
                "current_question": s.current_question,
                "total_questions": s.total_questions,
            }
            for s in self.session_repo.list_recent(limit=RECENT_SESSION_LIMIT)
        ]

    def get_score_distribution(self) -> list[dict]:
        """Completed-session counts per 20-point score band."""
        counts = {label: 0 for label, _ in SCORE_BUCKETS}
        for session in self.session_repo.list_completed():
            score = session.score or 0
            for label, upper in SCORE_BUCKETS:
                if upper is None or score <= upper:
                    counts[label] += 1
                    break
        return [{"score_range": label, "count": counts[label]} for label, _ in SCORE_BUCKETS]
