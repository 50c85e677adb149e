"""Domain models shared across tutor and admin features."""
from typing import List, Optional
from pydantic import BaseModel, Field


class Question(BaseModel):
    """A single question in a course question bank."""
    question: str
    answer: str
    explanation: str
    topics: List[str] = Field(default_factory=list)


class CourseSettingsValue(BaseModel):
    """Effective question count and max score for a course/difficulty pair."""
    course_type: str
    difficulty: str = "default"
    total_questions: int
    max_score: int
    updated_by: Optional[str] = None
    is_default: bool = False


class ChatMessage(BaseModel):
    """Role/content pair sent to the chat model."""
    role: str
    content: str


class ProgressUpdate(BaseModel):
    """Outcome of scoring one tutor exchange."""
    new_question: int
    new_score: int
    was_skip: bool
    applied: bool  # False when the course already reached its last question
