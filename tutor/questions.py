"""Question banks for the Convex learning courses."""
import logging
import random

from shared.models.domain import Question

logger = logging.getLogger(__name__)


# Practical development questions shared by the chat and cards formats
BUILD_APPS_QUESTIONS: list[Question] = [
    Question(
        question="What command creates a new Convex project?",
        answer="npx create-convex@latest",
        explanation="This command creates a new Convex project with all the necessary files and configuration.",
        topics=["setup", "commands"],
    ),
    Question(
        question="What file defines your database schema?",
        answer="convex/schema.ts",
        explanation="The schema.ts file in the convex directory defines your database tables and their structure.",
        topics=["schema", "files"],
    ),
    Question(
        question="What hook do you use to read data from Convex?",
        answer="useQuery",
        explanation="useQuery is the React hook used to read data from Convex. It provides real-time updates automatically.",
        topics=["hooks", "queries"],
    ),
    Question(
        question="What hook do you use to write data to Convex?",
        answer="useMutation",
        explanation="useMutation is the React hook used to write data to Convex database through mutation functions.",
        topics=["hooks", "mutations"],
    ),
    Question(
        question="What are the three types of Convex functions?",
        answer="query, mutation, action",
        explanation="Queries read data, mutations write data, and actions call external APIs or services.",
        topics=["functions", "architecture"],
    ),
    Question(
        question="How do you start the Convex development server?",
        answer="npx convex dev",
        explanation="This command starts the Convex development server and watches for changes in your functions.",
        topics=["development", "commands"],
    ),
    Question(
        question="What validator do you import for function arguments?",
        answer="v",
        explanation="Import { v } from 'convex/values' to use validators like v.string(), v.number(), etc.",
        topics=["validation", "imports"],
    ),
    Question(
        question="How do you define a table in Convex schema?",
        answer="defineTable",
        explanation="Use defineTable() to create table definitions with field validators and indexes.",
        topics=["schema", "tables"],
    ),
    Question(
        question="What's the purpose of indexes in Convex?",
        answer="optimize query performance",
        explanation="Indexes make queries faster by creating efficient lookup paths for your data fields.",
        topics=["indexes", "performance"],
    ),
    Question(
        question="How do you deploy your Convex functions?",
        answer="npx convex deploy",
        explanation="This command deploys your functions to production and makes them available to your application.",
        topics=["deployment", "commands"],
    ),
]


def get_questions_for_course(course_type: str) -> list[Question]:
    """Question bank for a course; unknown courses fall back to the build-apps bank."""
    if course_type in ("build-apps", "build-apps-cards"):
        return BUILD_APPS_QUESTIONS
    logger.warning(f"Unknown course type: {course_type}, falling back to build-apps questions")
    return BUILD_APPS_QUESTIONS


def shuffle_questions(questions: list[Question]) -> list[Question]:
    """Shuffled copy of ``questions``; the input list is left untouched."""
    shuffled = list(questions)
    random.shuffle(shuffled)
    return shuffled


def generate_randomized_question_order(total_questions: int) -> list[int]:
    """Random permutation of ``range(total_questions)``."""
    indices = list(range(total_questions))
    random.shuffle(indices)
    return indices
