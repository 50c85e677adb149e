"""Unit tests for tutor/services/scoring.py and tutor/questions.py"""

import pytest

from tutor.questions import (
    BUILD_APPS_QUESTIONS,
    generate_randomized_question_order,
    get_questions_for_course,
    shuffle_questions,
)
from tutor.services.scoring import (
    card_score,
    compute_progress,
    is_skip_message,
    points_per_question,
)


# ===========================================================================
# Question bank
# ===========================================================================

class TestQuestionBank:
    def test_build_apps_has_ten_questions(self):
        assert len(BUILD_APPS_QUESTIONS) == 10

    def test_first_question_is_project_setup(self):
        first = BUILD_APPS_QUESTIONS[0]
        assert first.question == "What command creates a new Convex project?"
        assert first.answer == "npx create-convex@latest"
        assert first.topics == ["setup", "commands"]

    @pytest.mark.parametrize("course_type", ["build-apps", "build-apps-cards"])
    def test_known_courses_share_bank(self, course_type):
        assert get_questions_for_course(course_type) is BUILD_APPS_QUESTIONS

    def test_unknown_course_falls_back(self):
        assert get_questions_for_course("rust-basics") is BUILD_APPS_QUESTIONS

    def test_shuffle_keeps_input_untouched(self):
        original = list(BUILD_APPS_QUESTIONS)
        shuffled = shuffle_questions(BUILD_APPS_QUESTIONS)

        assert BUILD_APPS_QUESTIONS == original
        assert sorted(q.question for q in shuffled) == sorted(q.question for q in original)

    def test_randomized_order_is_permutation(self):
        order = generate_randomized_question_order(7)
        assert sorted(order) == list(range(7))

    def test_randomized_order_empty(self):
        assert generate_randomized_question_order(0) == []


# ===========================================================================
# Chat scoring
# ===========================================================================

class TestSkipDetection:
    @pytest.mark.parametrize("text", ["skip", "SKIP", "  Skip  "])
    def test_skip_variants(self, text):
        assert is_skip_message(text) is True

    @pytest.mark.parametrize("text", ["skipping", "please skip", ""])
    def test_not_skip(self, text):
        assert is_skip_message(text) is False


class TestPointsPerQuestion:
    def test_integer_division(self):
        assert points_per_question(100, 7) == 14

    def test_zero_questions(self):
        assert points_per_question(100, 0) == 0


class TestComputeProgress:
    def test_answer_earns_full_points(self):
        progress = compute_progress(0, 0, 10, 100, "useQuery")

        assert progress.new_question == 1
        assert progress.new_score == 10
        assert progress.was_skip is False
        assert progress.applied is True

    def test_skip_earns_thirty_percent_rounded_down(self):
        progress = compute_progress(2, 28, 7, 100, "skip")

        assert progress.new_score == 28 + 4
        assert progress.was_skip is True

    def test_score_capped_at_max(self):
        progress = compute_progress(5, 95, 10, 100, "answer")
        assert progress.new_score == 100

    def test_last_question_still_applies(self):
        progress = compute_progress(9, 90, 10, 100, "answer")
        assert progress.applied is True
        assert progress.new_question == 10

    def test_past_last_question_not_applied(self):
        progress = compute_progress(10, 100, 10, 100, "answer")
        assert progress.applied is False


# ===========================================================================
# Card scoring
# ===========================================================================

class TestCardScore:
    def test_adds_share_of_hundred(self):
        assert card_score(0, 7) == 14

    def test_capped_at_hundred(self):
        assert card_score(98, 7) == 100

    def test_empty_deck_leaves_score(self):
        assert card_score(40, 0) == 40
