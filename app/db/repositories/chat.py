from datetime import datetime
from typing import Optional, List
from uuid import UUID

from sqlalchemy import select, update, delete, func

from app.core.errors import NotFoundError
from app.core.utils import utcnow
from app.db.models import ChatbotSession, ChatbotMessage, MessageType, SenderType, SessionStatus
from app.db.repositories.base import BaseRepository


class ChatRepository(BaseRepository):
    """Sessions and messages. Every write commits on its own."""

    async def get_active_session(self, visitor_id: str) -> Optional[ChatbotSession]:
        """Newest active session for a visitor, if any"""
        async with self._store_call("active session lookup"):
            result = await self.db.execute(
                select(ChatbotSession)
                .filter(ChatbotSession.visitor_id == visitor_id, ChatbotSession.status == "active")
                .order_by(ChatbotSession.created_at.desc())
                .limit(1)
            )
            return result.scalars().first()

    async def create_session(self, visitor_id: str, now: Optional[datetime] = None) -> ChatbotSession:
        now = now or utcnow()
        async with self._store_call("session insert"):
            session = ChatbotSession(
                visitor_id=visitor_id,
                status="active",
                total_messages=0,
                session_start=now,
                created_at=now,
                updated_at=now,
            )
            self.db.add(session)
            await self.db.commit()
            await self.db.refresh(session)
            return session

    async def add_message(
        self,
        session_id: UUID,
        visitor_id: str,
        content: str,
        sender_type: SenderType,
        message_type: MessageType = "text",
        metadata: Optional[dict] = None,
        response_time_ms: Optional[int] = None,
    ) -> ChatbotMessage:
        async with self._store_call(f"{sender_type} message insert"):
            message = ChatbotMessage(
                session_id=session_id,
                visitor_id=visitor_id,
                message_type=message_type,
                sender_type=sender_type,
                content=content,
                message_metadata=metadata,
                response_time_ms=response_time_ms,
                created_at=utcnow(),
            )
            self.db.add(message)
            await self.db.commit()
            await self.db.refresh(message)
            return message

    async def count_session_messages(self, session_id: UUID) -> int:
        async with self._store_call("message recount"):
            result = await self.db.execute(
                select(func.count(ChatbotMessage.id)).filter(ChatbotMessage.session_id == session_id)
            )
            return result.scalar_one()

    async def touch_session(self, session_id: UUID, total_messages: int, now: Optional[datetime] = None) -> None:
        async with self._store_call("session update"):
            await self.db.execute(
                update(ChatbotSession)
                .where(ChatbotSession.id == session_id)
                .values(total_messages=total_messages, updated_at=now or utcnow())
            )
            await self.db.commit()

    async def get_history(
        self,
        visitor_id: Optional[str] = None,
        session_id: Optional[UUID] = None,
        limit: int = 50,
    ) -> List[ChatbotMessage]:
        """Most recent messages first"""
        query = select(ChatbotMessage)
        if visitor_id:
            query = query.filter(ChatbotMessage.visitor_id == visitor_id)
        if session_id:
            query = query.filter(ChatbotMessage.session_id == session_id)
        query = query.order_by(ChatbotMessage.created_at.desc()).limit(limit)
        async with self._store_call("history query"):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def list_sessions(self, limit: int = 100, status: Optional[SessionStatus] = None) -> List[ChatbotSession]:
        query = select(ChatbotSession)
        if status:
            query = query.filter(ChatbotSession.status == status)
        query = query.order_by(ChatbotSession.created_at.desc()).limit(limit)
        async with self._store_call("session listing"):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def get_session(self, session_id: UUID) -> ChatbotSession:
        async with self._store_call("session lookup"):
            session = await self.db.get(ChatbotSession, session_id)
        if session is None:
            raise NotFoundError("Chat session not found")
        return session

    async def get_session_messages(self, session_id: UUID) -> List[ChatbotMessage]:
        """Transcript of one session in chronological order"""
        await self.get_session(session_id)
        async with self._store_call("session messages query"):
            result = await self.db.execute(
                select(ChatbotMessage)
                .filter(ChatbotMessage.session_id == session_id)
                .order_by(ChatbotMessage.created_at)
            )
            return list(result.scalars().all())

    async def end_session(self, session_id: UUID) -> ChatbotSession:
        session = await self.get_session(session_id)
        now = utcnow()
        async with self._store_call("session end"):
            session.status = "ended"
            session.session_end = now
            session.updated_at = now
            await self.db.commit()
            await self.db.refresh(session)
        return session

    async def delete_session(self, session_id: UUID) -> None:
        """Delete a session and all its messages"""
        await self.get_session(session_id)
        async with self._store_call("session delete"):
            await self.db.execute(
                delete(ChatbotMessage).where(ChatbotMessage.session_id == session_id)
            )
            await self.db.execute(
                delete(ChatbotSession).where(ChatbotSession.id == session_id)
            )
            await self.db.commit()

    async def get_sessions_since(self, since: datetime) -> List[ChatbotSession]:
        async with self._store_call("analytics sessions query"):
            result = await self.db.execute(
                select(ChatbotSession).filter(ChatbotSession.created_at >= since)
            )
            return list(result.scalars().all())

    async def get_messages_since(self, since: datetime) -> List[ChatbotMessage]:
        async with self._store_call("analytics messages query"):
            result = await self.db.execute(
                select(ChatbotMessage).filter(ChatbotMessage.created_at >= since)
            )
            return list(result.scalars().all())
