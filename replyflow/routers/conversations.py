from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from replyflow.database import get_db
from replyflow.schemas.conversation import PauseRequest, TakeoverResponse
from replyflow.services.takeover_service import pause_ai, resume_ai

router = APIRouter(prefix="/conversations", tags=["conversations"])


def _takeover_response(conversation) -> TakeoverResponse:
    return TakeoverResponse(
        success=True,
        session_id=conversation.id,
        human_takeover=conversation.human_takeover,
        auto_resume_at=conversation.auto_resume_at,
    )


@router.post("/{session_id}/pause", response_model=TakeoverResponse)
def pause_conversation_ai(
    session_id: UUID,
    request: Optional[PauseRequest] = None,
    x_company_id: UUID = Header(...),
    db: Session = Depends(get_db),
):
    duration = request.duration_minutes if request else None
    conversation = pause_ai(db, x_company_id, session_id, duration_minutes=duration)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    db.commit()
    return _takeover_response(conversation)


@router.post("/{session_id}/resume", response_model=TakeoverResponse)
def resume_conversation_ai(
    session_id: UUID,
    x_company_id: UUID = Header(...),
    db: Session = Depends(get_db),
):
    conversation = resume_ai(db, x_company_id, session_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    db.commit()
    return _takeover_response(conversation)
