from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.logger import logger
from app.core.security import require_admin
from app.db.models import SessionStatus
from app.db.repositories.chat import ChatRepository
from app.db.repositories.faq import FAQRepository
from app.db.repositories.settings import SettingsRepository
from app.db.session import get_db
from app.models.chat import (
    DailyStatsOut,
    FAQCreate,
    FAQOut,
    FAQUpdate,
    MessageOut,
    SessionOut,
    SettingOut,
    SettingUpdate,
)
from app.services.analytics import daily_stats

router = APIRouter(
    prefix="/admin/chatbot",
    tags=["Chatbot Admin"],
    dependencies=[Depends(require_admin)],
)


@router.get("/sessions", response_model=List[SessionOut])
async def list_sessions(
    limit: Optional[int] = Query(None, ge=1, le=1000),
    session_status: Optional[SessionStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    """Chat sessions, newest first."""
    return await ChatRepository(db).list_sessions(
        limit=limit or settings.ADMIN_SESSIONS_LIMIT,
        status=session_status,
    )


@router.get("/sessions/{session_id}/messages", response_model=List[MessageOut])
async def get_session_messages(session_id: UUID, db: AsyncSession = Depends(get_db)):
    """
    Transcript of a chat session

    Args:
        session_id: UUID of the chat session

    Returns:
        List of messages in chronological order
    """
    messages = await ChatRepository(db).get_session_messages(session_id)
    return [MessageOut.model_validate(msg) for msg in messages]


@router.post("/sessions/{session_id}/end", response_model=SessionOut)
async def end_session(
    session_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    session = await ChatRepository(db).end_session(session_id)
    logger.info(f"Session {session_id} ended by {admin.get('sub')}")
    return session


@router.delete("/sessions/{session_id}")
async def delete_session(
    session_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    await ChatRepository(db).delete_session(session_id)
    logger.info(f"Session {session_id} deleted by {admin.get('sub')}")
    return {"detail": "Chat session deleted successfully"}


@router.post("/faq", response_model=FAQOut, status_code=status.HTTP_201_CREATED)
async def create_faq(
    faq: FAQCreate,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    return await FAQRepository(db).create_entry(**faq.model_dump(), created_by=admin.get("sub"))


@router.patch("/faq/{faq_id}", response_model=FAQOut)
async def update_faq(faq_id: UUID, updates: FAQUpdate, db: AsyncSession = Depends(get_db)):
    return await FAQRepository(db).update_entry(faq_id, **updates.model_dump(exclude_unset=True))


@router.delete("/faq/{faq_id}")
async def delete_faq(faq_id: UUID, db: AsyncSession = Depends(get_db)):
    await FAQRepository(db).delete_entry(faq_id)
    return {"detail": "FAQ entry deleted successfully"}


@router.get("/settings", response_model=List[SettingOut])
async def list_settings(db: AsyncSession = Depends(get_db)):
    return await SettingsRepository(db).list_settings()


@router.put("/settings/{key}", response_model=SettingOut)
async def update_setting(key: str, update: SettingUpdate, db: AsyncSession = Depends(get_db)):
    return await SettingsRepository(db).update_value(key, update.setting_value)


@router.get("/analytics", response_model=List[DailyStatsOut])
async def get_analytics(
    days: int = Query(7, ge=1, le=90),
    db: AsyncSession = Depends(get_db),
):
    """Daily session/message totals, newest day first."""
    return await daily_stats(ChatRepository(db), days=days)
