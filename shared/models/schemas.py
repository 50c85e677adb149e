"""Pydantic API request/response schemas."""
from pydantic import BaseModel, Field
from typing import List, Optional

from .domain import Question, CourseSettingsValue


# ── Learner sessions ─────────────────────────────────────────────

class CreateSessionRequest(BaseModel):
    """Request to start (or resume) a course session."""
    session_id: str = Field(..., min_length=1)
    course_type: Optional[str] = None
    difficulty: str = "default"
    force_new: bool = False


class MessageResponse(BaseModel):
    """One transcript entry."""
    message_id: str
    role: str
    content: str
    timestamp: int
    is_admin_intervention: bool = False
    admin_note: Optional[str] = None
    is_voice_message: bool = False
    voice_command: Optional[str] = None


class SessionResponse(BaseModel):
    """Learner-facing session state."""
    session_id: str
    course_type: Optional[str] = None
    difficulty: Optional[str] = None
    current_question: int
    total_questions: Optional[int] = None
    score: int
    is_completed: bool
    is_archived: bool = False
    last_action_was_skip: Optional[bool] = None
    randomized_question_order: Optional[List[int]] = None
    created_at: int
    messages: List[MessageResponse] = Field(default_factory=list)


class AddMessageRequest(BaseModel):
    """Append a message to the transcript."""
    role: str
    content: str
    is_voice_message: bool = False
    voice_command: Optional[str] = None


class UpdateSessionRequest(BaseModel):
    """Partial update of learner progress; omitted fields stay unchanged."""
    course_type: Optional[str] = None
    current_question: Optional[int] = None
    total_questions: Optional[int] = None
    score: Optional[int] = None
    is_completed: Optional[bool] = None
    last_action_was_skip: Optional[bool] = None


class RespondRequest(BaseModel):
    """A learner turn sent to the tutor."""
    user_message: str


class RespondResponse(BaseModel):
    """Tutor reply; empty while an admin has taken over the session."""
    response: str


class CardRequest(BaseModel):
    card_index: int = Field(..., ge=0)


class CardAnswerRequest(CardRequest):
    answer: str


class CardAnswerResponse(BaseModel):
    is_correct: Optional[bool] = None
    expected_answer: Optional[str] = None
    explanation: Optional[str] = None
    is_completed: bool
    score: int
    current_question: int


class AgentFlowStatus(BaseModel):
    is_enabled: bool
    thread_id: Optional[str] = None
    last_activity: Optional[int] = None


class InitializeAgentFlowRequest(BaseModel):
    thread_id: str


# ── Admin playground ─────────────────────────────────────────────

class SessionSummary(BaseModel):
    """Row in the playground session list."""
    session_id: str
    course_type: Optional[str] = None
    current_question: int
    total_questions: Optional[int] = None
    score: int
    is_completed: bool
    is_archived: bool
    last_activity: int
    message_count: int
    has_admin_intervention: bool
    is_taken_over: bool


class SessionListItem(BaseModel):
    """Row in the full session listing."""
    session_id: str
    course_type: Optional[str] = None
    difficulty: Optional[str] = None
    current_question: int
    total_questions: Optional[int] = None
    score: int
    is_completed: bool
    is_archived: bool
    created_at: int
    last_action_was_skip: Optional[bool] = None
    is_taken_over: bool


class SessionDetails(BaseModel):
    session_id: str
    course_type: str
    current_question: int
    total_questions: int
    score: int
    is_completed: bool
    created_at: int
    last_activity: int
    message_count: int
    has_admin_intervention: bool
    can_take_over: bool
    can_restore: bool


class SessionWithMessages(SessionDetails):
    is_taken_over: bool
    current_context: str
    messages: List[MessageResponse]


class TakeoverRequest(BaseModel):
    takeover: bool


class TakeoverStatus(BaseModel):
    is_taken_over: bool


class AdminMessageRequest(BaseModel):
    content: str = Field(..., min_length=1)
    admin_note: Optional[str] = None
    target_context: Optional[str] = None  # "current", "card_3", "question_5"


class AdminMessageResponse(BaseModel):
    message_id: str
    context: str


class ContextualAdminMessage(BaseModel):
    message_id: str
    content: str
    admin_note: Optional[str] = None
    timestamp: int


class EditMessageRequest(BaseModel):
    new_content: str
    admin_note: Optional[str] = None


class EditMessageResponse(BaseModel):
    success: bool
    original_content: str


class DeleteMessageResponse(BaseModel):
    success: bool
    deleted_content: str
    message_type: Optional[str] = None  # "admin" or "ai"


class ProgressUpdateRequest(BaseModel):
    score_adjustment: Optional[int] = None
    question_jump: Optional[int] = None
    mark_completed: Optional[bool] = None


class ArchiveRequest(BaseModel):
    archive: bool


class BulkSessionsRequest(BaseModel):
    session_ids: List[str]


class BulkArchiveRequest(BulkSessionsRequest):
    archive: bool


class BulkArchiveResult(BaseModel):
    processed: int
    errors: int


class BulkDeleteResult(BaseModel):
    deleted: int
    errors: int


class BulkClearResult(BaseModel):
    cleared: int
    errors: int


class RecentActivity(BaseModel):
    session_id: str
    course_type: Optional[str] = None
    last_message: str
    timestamp: int


class AdminStats(BaseModel):
    total_sessions: int
    active_sessions: int
    completed_sessions: int
    archived_sessions: int
    average_score: float
    sessions_with_intervention: int
    recent_activity: List[RecentActivity]


# ── Stats ────────────────────────────────────────────────────────

class CourseBreakdown(BaseModel):
    chat_mode: int
    cards_mode: int
    how_convex_works: int


class ModeAverages(BaseModel):
    chat_mode: float
    cards_mode: float
    how_convex_works: float


class OverallStats(BaseModel):
    total_sessions_completed: int
    total_sessions_started: int
    average_score: float
    total_questions_answered: int
    course_breakdown: CourseBreakdown
    average_score_by_mode: ModeAverages
    completion_rate: float
    total_skipped_questions: int
    correct_answers_estimate: int
    incorrect_answers_estimate: int


class RecentSession(BaseModel):
    session_id: str
    created_at: int
    score: int
    course_type: Optional[str] = None
    is_completed: bool
    current_question: int
    total_questions: Optional[int] = None


class ScoreBucket(BaseModel):
    score_range: str
    count: int


class AgentActivity(BaseModel):
    session_id: str
    timestamp: int
    token_usage: int


class AgentFlowAnalytics(BaseModel):
    total_sessions: int
    average_token_usage: int
    success_rate: int
    recent_activity: List[AgentActivity]


class TrackUsageRequest(BaseModel):
    session_id: str
    input_tokens: int = Field(..., ge=0)
    output_tokens: int = Field(..., ge=0)
    total_tokens: int = Field(..., ge=0)
    response_time: Optional[int] = None


# ── Course settings & docs ───────────────────────────────────────

class UpdateCourseSettingsRequest(BaseModel):
    course_type: str
    difficulty: str = "default"
    total_questions: int
    max_score: int
    updated_by: Optional[str] = None


class InitializeRequest(BaseModel):
    updated_by: str = "admin"


class CourseDocResponse(BaseModel):
    doc_type: str
    url: str
    content: Optional[str] = None
    last_fetched: int
    is_active: bool
    updated_by: Optional[str] = None


class UpsertCourseDocRequest(BaseModel):
    doc_type: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    content: Optional[str] = None
    is_active: bool = True
    updated_by: Optional[str] = None


class RefreshDocRequest(BaseModel):
    url: Optional[str] = None
    updated_by: Optional[str] = None


class RefreshAllResult(BaseModel):
    refreshed: List[str]
    failed: List[str]

