from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import APOLOGY_MESSAGE, ChatbotError, UpstreamStoreError, ValidationError
from app.core.logger import logger
from app.db.repositories.chat import ChatRepository
from app.db.repositories.faq import FAQRepository
from app.db.repositories.settings import SettingsRepository
from app.db.session import get_db
from app.models.chat import (
    ChatMessageIn,
    ChatReplyOut,
    FAQListOut,
    FAQOut,
    HistoryOut,
    MessageOut,
    StatusOut,
)
from app.services.chat_flow import ChatFlow
from app.services.replies import get_reply_provider

router = APIRouter(prefix="/chatbot", tags=["Chatbot"])


def get_chat_flow(db: AsyncSession = Depends(get_db)) -> ChatFlow:
    return ChatFlow(ChatRepository(db), get_reply_provider(settings.REPLY_PROVIDER, db))


@router.post("/message", response_model=ChatReplyOut)
async def post_message(
    payload: Optional[ChatMessageIn] = Body(default=None),
    chat_flow: ChatFlow = Depends(get_chat_flow),
):
    """
    Store a visitor message and answer it.

    Creates the visitor ID and the chat session when they don't exist yet.
    On failure the widget gets a displayable apology next to the error.
    """
    payload = payload or ChatMessageIn()
    try:
        result = await chat_flow.process(payload.message, payload.visitor_id)
        return ChatReplyOut(**result)
    except ValidationError:
        raise
    except Exception as e:
        if not isinstance(e, UpstreamStoreError):
            logger.error(f"Error in chatbot message endpoint: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": UpstreamStoreError.public_message,
                "message": APOLOGY_MESSAGE,
            },
        )


@router.get("/faq", response_model=FAQListOut)
async def list_faq(
    category: Optional[str] = Query(None, description="Only entries of this category"),
    db: AsyncSession = Depends(get_db),
):
    """Active FAQ entries, ordered by priority."""
    try:
        faqs = await FAQRepository(db).get_active_entries(category)
        return FAQListOut(faqs=[FAQOut.model_validate(faq) for faq in faqs])
    except ChatbotError as e:
        return JSONResponse(
            status_code=e.status_code,
            content={"success": False, "error": e.public_message, "faqs": []},
        )


@router.get("/history", response_model=HistoryOut)
async def get_history(
    visitor_id: Optional[str] = Query(None),
    session_id: Optional[UUID] = Query(None),
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """Most recent messages of a visitor (or one session), newest first."""
    if not visitor_id and not session_id:
        raise ValidationError("visitor_id or session_id is required")

    limit = min(limit or settings.HISTORY_DEFAULT_LIMIT, settings.HISTORY_MAX_LIMIT)
    try:
        messages = await ChatRepository(db).get_history(visitor_id, session_id, limit)
    except ChatbotError as e:
        return JSONResponse(
            status_code=e.status_code,
            content={"success": False, "error": e.public_message, "messages": [], "count": 0},
        )
    return HistoryOut(
        messages=[MessageOut.model_validate(msg) for msg in messages],
        count=len(messages),
    )


@router.get("/status", response_model=StatusOut)
async def get_status(db: AsyncSession = Depends(get_db)):
    value = await SettingsRepository(db).get_value("chatbot_status", default="active")
    return StatusOut(status=value)
