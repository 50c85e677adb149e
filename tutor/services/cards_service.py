"""Flashcard ("cards") mode progress over the session's randomized questions."""

import logging
from sqlalchemy.orm import Session as DBSession

from shared.models.entities import CourseSession
from shared.repositories import SessionRepository
from shared.utils.exceptions import InvalidCardIndexException
from tutor.services.scoring import card_score
from tutor.services.session_service import CourseSessionService

logger = logging.getLogger("tutor.cards_service")

END_COMMAND = "end"


def _normalize(text: str) -> str:
    return text.strip().lower()


class FlashcardService:
    """Checks card answers and moves the learner through the deck."""

    def __init__(self, db: DBSession):
        self.db = db
        self.session_repo = SessionRepository(db)
        self.session_service = CourseSessionService(db)

    def answer_card(self, session_id: str, card_index: int, answer: str) -> dict:
        """
        Check an answer for one card.

        Typing "end" finishes the course immediately, but only from a valid
        card; an empty deck raises InvalidCardIndexException. A correct answer
        moves the learner past the card and adds ``100 // card_count`` to the
        score; a wrong answer changes nothing.
        """
        session = self.session_service.require_session(session_id)
        cards = self.session_service.get_randomized_questions(session_id)

        card = self._card_at(cards, card_index)
        if _normalize(answer) == END_COMMAND:
            self._complete(session, len(cards))
            return self._result(session, None, None, None)

        is_correct = _normalize(answer) == _normalize(card.answer)
        if is_correct:
            session.current_question = card_index + 1
            session.score = card_score(session.score, len(cards))
            session.last_action_was_skip = False
            self.session_repo.save(session)

        return self._result(session, is_correct, card.answer, card.explanation)

    def skip_card(self, session_id: str, card_index: int) -> CourseSession:
        """Advance without points; skipping the last card completes the course."""
        session = self.session_service.require_session(session_id)
        cards = self.session_service.get_randomized_questions(session_id)
        self._card_at(cards, card_index)

        session.current_question = card_index + 1
        session.last_action_was_skip = True
        if card_index >= len(cards) - 1:
            return self._complete(session, len(cards))
        return self.session_repo.save(session)

    def next_card(self, session_id: str, card_index: int) -> CourseSession:
        """Move on; leaving the last card completes the course."""
        session = self.session_service.require_session(session_id)
        cards = self.session_service.get_randomized_questions(session_id)
        self._card_at(cards, card_index)

        if card_index >= len(cards) - 1:
            return self._complete(session, len(cards))
        return session

    # ─── Helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _card_at(cards: list, card_index: int):
        if not 0 <= card_index < len(cards):
            raise InvalidCardIndexException(card_index, len(cards))
        return cards[card_index]

    def _complete(self, session: CourseSession, card_count: int) -> CourseSession:
        session.current_question = card_count
        session.total_questions = card_count
        session.is_completed = True
        logger.info(f"Cards session {session.session_id} completed with score {session.score}")
        return self.session_repo.save(session)

    @staticmethod
    def _result(session: CourseSession, is_correct, expected_answer, explanation) -> dict:
        return {
            "is_correct": is_correct,
            "expected_answer": expected_answer,
            "explanation": explanation,
            "is_completed": session.is_completed,
            "score": session.score,
            "current_question": session.current_question,
        }
