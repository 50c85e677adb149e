"""Scoring arithmetic for chat-tutor exchanges and flashcards."""
from shared.models.domain import ProgressUpdate

SKIP_MESSAGE = "skip"
SKIP_CREDIT = 0.3
CARDS_MAX_SCORE = 100


def is_skip_message(user_message: str) -> bool:
    return user_message.strip().lower() == SKIP_MESSAGE


def points_per_question(max_score: int, total_questions: int) -> int:
    if total_questions <= 0:
        return 0
    return max_score // total_questions


def compute_progress(
    current_question: int,
    score: int,
    total_questions: int,
    max_score: int,
    user_message: str,
) -> ProgressUpdate:
    """
    Score one tutor exchange.

    A full answer earns ``max_score // total_questions``; a skip earns 30% of
    that, rounded down. The score never exceeds ``max_score``, and progress is
    only applied while the next question number stays within the course.
    """
    was_skip = is_skip_message(user_message)
    points = points_per_question(max_score, total_questions)
    earned = int(points * SKIP_CREDIT) if was_skip else points
    new_question = current_question + 1
    return ProgressUpdate(
        new_question=new_question,
        new_score=min(score + earned, max_score),
        was_skip=was_skip,
        applied=new_question <= total_questions,
    )


def card_score(score: int, card_count: int) -> int:
    """Score after one correct card answer, capped at 100."""
    if card_count <= 0:
        return score
    return min(score + CARDS_MAX_SCORE // card_count, CARDS_MAX_SCORE)
