"""Learner session API endpoints."""
import logging
import traceback
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session as DBSession

from database import get_db
from shared.models.entities import CourseSession
from shared.models.schemas import (
    AddMessageRequest,
    AgentFlowStatus,
    CardAnswerRequest,
    CardAnswerResponse,
    CardRequest,
    CreateSessionRequest,
    InitializeAgentFlowRequest,
    MessageResponse,
    Question,
    RespondRequest,
    RespondResponse,
    SessionResponse,
    UpdateSessionRequest,
)
from shared.utils.exceptions import CourseTutorException
from shared.utils.message_utils import datetime_to_ms, message_to_dict
from admin.services.agent_usage_service import AgentUsageService
from tutor.services.cards_service import FlashcardService
from tutor.services.response_service import TutorResponseService
from tutor.services.session_service import CourseSessionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def session_to_response(session: CourseSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        course_type=session.course_type,
        difficulty=session.difficulty,
        current_question=session.current_question,
        total_questions=session.total_questions,
        score=session.score,
        is_completed=session.is_completed,
        is_archived=bool(session.is_archived),
        last_action_was_skip=session.last_action_was_skip,
        randomized_question_order=session.randomized_question_order,
        created_at=datetime_to_ms(session.created_at),
        messages=[
            MessageResponse(**message_to_dict(session.session_id, index, message))
            for index, message in enumerate(session.messages)
        ],
    )


def _internal_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error {action}: {str(e)}\n{traceback.format_exc()}")
    return HTTPException(
        status_code=500,
        detail={"message": f"Error {action}: {str(e)}", "type": type(e).__name__},
    )


@router.post("", response_model=SessionResponse)
def create_session(request: CreateSessionRequest, db: DBSession = Depends(get_db)):
    """Start a course session; an existing id is returned unless force_new is set."""
    try:
        service = CourseSessionService(db)
        session = service.create_session(
            request.session_id,
            course_type=request.course_type,
            difficulty=request.difficulty,
            force_new=request.force_new,
        )
        return session_to_response(session)
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("creating session", e)


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, db: DBSession = Depends(get_db)):
    """Get session state with its transcript."""
    session = CourseSessionService(db).get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session_to_response(session)


@router.patch("/{session_id}", response_model=SessionResponse)
def update_session(session_id: str, request: UpdateSessionRequest, db: DBSession = Depends(get_db)):
    """Partially update progress fields."""
    try:
        service = CourseSessionService(db)
        session = service.update_session(session_id, **request.model_dump(exclude_unset=True))
        return session_to_response(session)
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("updating session", e)


@router.post("/{session_id}/messages", response_model=MessageResponse)
def add_message(session_id: str, request: AddMessageRequest, db: DBSession = Depends(get_db)):
    """Append a message to the transcript."""
    try:
        service = CourseSessionService(db)
        message = service.add_message(
            session_id,
            request.role,
            request.content,
            is_voice_message=request.is_voice_message,
            voice_command=request.voice_command,
        )
        return MessageResponse(**message_to_dict(session_id, message.position, message))
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("adding message", e)


@router.post("/{session_id}/end", response_model=SessionResponse)
def end_course(session_id: str, db: DBSession = Depends(get_db)):
    """Mark the course as completed."""
    try:
        return session_to_response(CourseSessionService(db).end_course(session_id))
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("ending course", e)


@router.get("/{session_id}/current-question", response_model=Optional[Question])
def get_current_question(session_id: str, db: DBSession = Depends(get_db)):
    """Question at the learner's position; null once the course is over."""
    return CourseSessionService(db).get_current_question(session_id)


@router.get("/{session_id}/questions", response_model=List[Question])
def get_randomized_questions(session_id: str, db: DBSession = Depends(get_db)):
    """All questions of the session in its randomized order (cards mode)."""
    return CourseSessionService(db).get_randomized_questions(session_id)


@router.post("/{session_id}/respond", response_model=RespondResponse)
def respond(session_id: str, request: RespondRequest, db: DBSession = Depends(get_db)):
    """Classic tutor reply to a learner message."""
    try:
        service = TutorResponseService(db)
        return RespondResponse(response=service.generate_response(session_id, request.user_message))
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("generating response", e)


@router.post("/{session_id}/respond/agent", response_model=RespondResponse)
def respond_with_agent(session_id: str, request: RespondRequest, db: DBSession = Depends(get_db)):
    """Agent tutor reply to a learner message."""
    try:
        service = TutorResponseService(db)
        reply = service.generate_response_with_agent(session_id, request.user_message)
        return RespondResponse(response=reply)
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("generating agent response", e)


@router.post("/{session_id}/cards/answer", response_model=CardAnswerResponse)
def answer_card(session_id: str, request: CardAnswerRequest, db: DBSession = Depends(get_db)):
    try:
        result = FlashcardService(db).answer_card(session_id, request.card_index, request.answer)
        return CardAnswerResponse(**result)
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("answering card", e)


@router.post("/{session_id}/cards/skip", response_model=SessionResponse)
def skip_card(session_id: str, request: CardRequest, db: DBSession = Depends(get_db)):
    try:
        return session_to_response(FlashcardService(db).skip_card(session_id, request.card_index))
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("skipping card", e)


@router.post("/{session_id}/cards/next", response_model=SessionResponse)
def next_card(session_id: str, request: CardRequest, db: DBSession = Depends(get_db)):
    try:
        return session_to_response(FlashcardService(db).next_card(session_id, request.card_index))
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("advancing card", e)


@router.get("/{session_id}/agent-flow", response_model=AgentFlowStatus)
def get_agent_flow_status(session_id: str, db: DBSession = Depends(get_db)):
    return AgentFlowStatus(**AgentUsageService(db).get_agent_flow_status(session_id))


@router.post("/{session_id}/agent-flow")
def initialize_agent_flow(
    session_id: str,
    request: InitializeAgentFlowRequest,
    db: DBSession = Depends(get_db),
):
    """Attach an agent thread id to the session."""
    try:
        return AgentUsageService(db).initialize_agent_flow(session_id, request.thread_id)
    except CourseTutorException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("initializing agent flow", e)
