"""Unit tests for tutor/services/cards_service.py"""

import pytest

from shared.repositories import SessionRepository
from shared.utils.exceptions import InvalidCardIndexException, SessionNotFoundException
from tutor.services.cards_service import FlashcardService
from tutor.services.session_service import CourseSessionService


@pytest.fixture
def cards(db_session, session_factory):
    """A build-apps-cards session and its deck, in session order."""
    session_factory(course_type="build-apps-cards")
    return CourseSessionService(db_session).get_randomized_questions("sess-1")


def _session(db_session):
    return SessionRepository(db_session).get_by_session_id("sess-1")


# ===========================================================================
# Answering
# ===========================================================================

class TestAnswerCard:
    def test_correct_answer_advances(self, db_session, cards):
        result = FlashcardService(db_session).answer_card("sess-1", 0, cards[0].answer)

        assert result["is_correct"] is True
        assert result["expected_answer"] == cards[0].answer
        assert result["explanation"] == cards[0].explanation
        assert result["score"] == 14
        assert result["current_question"] == 1
        assert result["is_completed"] is False

    def test_answer_is_case_and_space_insensitive(self, db_session, cards):
        answer = f"  {cards[0].answer.upper()} "
        result = FlashcardService(db_session).answer_card("sess-1", 0, answer)
        assert result["is_correct"] is True

    def test_wrong_answer_changes_nothing(self, db_session, cards):
        result = FlashcardService(db_session).answer_card("sess-1", 0, "definitely wrong")

        assert result["is_correct"] is False
        assert result["expected_answer"] == cards[0].answer
        assert result["score"] == 0
        assert result["current_question"] == 0

    def test_end_completes_course(self, db_session, cards):
        result = FlashcardService(db_session).answer_card("sess-1", 2, "END")

        assert result["is_correct"] is None
        assert result["is_completed"] is True
        assert result["current_question"] == len(cards)
        assert _session(db_session).total_questions == len(cards)

    def test_end_on_empty_deck_rejected(self, db_session, session_factory):
        session_factory(course_type=None)

        with pytest.raises(InvalidCardIndexException):
            FlashcardService(db_session).answer_card("sess-1", 0, "end")

        session = _session(db_session)
        assert session.is_completed is False
        assert session.total_questions != 0

    def test_score_capped(self, db_session, cards):
        session = _session(db_session)
        session.score = 95
        SessionRepository(db_session).save(session)

        result = FlashcardService(db_session).answer_card("sess-1", 0, cards[0].answer)
        assert result["score"] == 100

    def test_index_out_of_range(self, db_session, cards):
        with pytest.raises(InvalidCardIndexException):
            FlashcardService(db_session).answer_card("sess-1", len(cards), "x")

    def test_missing_session(self, db_session):
        with pytest.raises(SessionNotFoundException):
            FlashcardService(db_session).answer_card("nope", 0, "x")


# ===========================================================================
# Skip / next
# ===========================================================================

class TestSkipAndNext:
    def test_skip_advances_without_points(self, db_session, cards):
        session = FlashcardService(db_session).skip_card("sess-1", 0)

        assert session.current_question == 1
        assert session.score == 0
        assert session.last_action_was_skip is True
        assert session.is_completed is False

    def test_skip_last_card_completes(self, db_session, cards):
        session = FlashcardService(db_session).skip_card("sess-1", len(cards) - 1)

        assert session.is_completed is True
        assert session.current_question == len(cards)

    def test_next_keeps_position(self, db_session, cards):
        session = FlashcardService(db_session).next_card("sess-1", 0)
        assert session.is_completed is False
        assert session.current_question == 0

    def test_next_on_last_card_completes(self, db_session, cards):
        session = FlashcardService(db_session).next_card("sess-1", len(cards) - 1)
        assert session.is_completed is True

    def test_correct_answer_clears_skip_flag(self, db_session, cards):
        service = FlashcardService(db_session)
        service.skip_card("sess-1", 0)
        service.answer_card("sess-1", 1, cards[1].answer)

        assert _session(db_session).last_action_was_skip is False
