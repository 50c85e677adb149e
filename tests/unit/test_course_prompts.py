"""Unit tests for tutor/prompts/"""

from types import SimpleNamespace

import pytest

from shared.utils.exceptions import PromptTemplateError
from tutor.prompts.course_prompts import (
    AGENT_WELCOME_MESSAGE,
    NO_QUESTION_CONTEXT,
    build_agent_system_prompt,
    build_course_system_prompt,
    build_question_context,
)
from tutor.prompts.templates import PromptTemplate, format_list_for_prompt
from tutor.questions import BUILD_APPS_QUESTIONS


# ============================================================================
# PromptTemplate
# ============================================================================

class TestPromptTemplate:
    def test_render(self):
        template = PromptTemplate("Hello {name}", name="greet")
        assert template.render(name="Ada") == "Hello Ada"

    def test_missing_variable(self):
        template = PromptTemplate("{a} and {b}", name="pair")
        with pytest.raises(PromptTemplateError) as exc_info:
            template.render(a="1")
        assert exc_info.value.missing_vars == ["b"]
        assert exc_info.value.template_name == "pair"

    def test_defaults(self):
        template = PromptTemplate("{x}", defaults={"x": "default"})
        assert template.render() == "default"

    def test_format_list(self):
        assert format_list_for_prompt(["a", "b"]) == "- a\n- b"
        assert format_list_for_prompt([]) == "None"


# ============================================================================
# Course prompts
# ============================================================================

class TestCoursePrompts:
    def test_question_context_includes_answer(self):
        context = build_question_context(BUILD_APPS_QUESTIONS[2])
        assert "**What hook do you use to read data from Convex?**" in context
        assert "EXPECTED ANSWER: useQuery" in context
        assert "TOPICS COVERED: hooks, queries" in context

    def test_no_question(self):
        assert build_question_context(None) == NO_QUESTION_CONTEXT

    def test_build_apps_prompt_progress(self):
        prompt = build_course_system_prompt(
            course_type="build-apps",
            current_question=2,
            total_questions=7,
            score=28,
            max_score=100,
            question=BUILD_APPS_QUESTIONS[0],
        )
        assert "practical Convex.dev development" in prompt
        assert "Current question: 3/7" in prompt
        assert "Current score: 28/100" in prompt
        assert "SKIP HANDLING" in prompt

    def test_how_convex_works_prompt(self):
        prompt = build_course_system_prompt("how-convex-works", 0, 10, 0, 100, None)
        assert "Convex.dev fundamentals" in prompt
        assert NO_QUESTION_CONTEXT in prompt

    def test_agent_prompt_lists_docs(self):
        docs = [SimpleNamespace(doc_type="queries", url="https://docs.convex.dev/q")]
        prompt = build_agent_system_prompt(docs)
        assert "- queries: https://docs.convex.dev/q" in prompt

    def test_agent_prompt_without_docs(self):
        prompt = build_agent_system_prompt([])
        assert prompt.rstrip().endswith("Convex Documentation References:")

    def test_welcome_message(self):
        assert AGENT_WELCOME_MESSAGE.startswith("🚀 **Welcome to AgentFlow Enhanced Learning!**")
