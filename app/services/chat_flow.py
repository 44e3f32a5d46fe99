import time
from typing import Optional, TypedDict
from uuid import UUID

from app.core.errors import ValidationError
from app.core.logger import logger
from app.core.utils import epoch_millis, generate_visitor_id, sanitize_text, utcnow
from app.db.repositories.chat import ChatRepository
from app.services.replies import ReplyProvider


class ChatResult(TypedDict):
    message: str
    session_id: str
    visitor_id: str
    response_time: int  # epoch milliseconds


class ChatFlow:
    """
    Message ingestion: resolve visitor and session, store the visitor's
    message, pick a reply, store it, then recount the session.

    Every store write is committed on its own. A failure part way through
    leaves the earlier writes in place.
    """

    def __init__(self, chat_repo: ChatRepository, reply_provider: ReplyProvider):
        self.chat_repo = chat_repo
        self.reply_provider = reply_provider

    async def resolve_session(self, visitor_id: str) -> UUID:
        """Get-or-create the visitor's active session (read then write, no lock)"""
        session = await self.chat_repo.get_active_session(visitor_id)
        if session:
            return session.id

        session = await self.chat_repo.create_session(visitor_id, now=utcnow())
        logger.info(f"Created chat session {session.id} for visitor {visitor_id}")
        return session.id

    async def recount(self, session_id: UUID) -> int:
        """Write the actual message count to the session and bump updated_at"""
        total = await self.chat_repo.count_session_messages(session_id)
        await self.chat_repo.touch_session(session_id, total, now=utcnow())
        return total

    async def process(self, message: Optional[str], visitor_id: Optional[str] = None) -> ChatResult:
        content = sanitize_text(message) if message else ""
        if not content:
            raise ValidationError("Message is required")

        started = time.monotonic()
        visitor_id = visitor_id or generate_visitor_id()

        session_id = await self.resolve_session(visitor_id)

        await self.chat_repo.add_message(session_id, visitor_id, content, "user")

        reply = await self.reply_provider.generate(content)
        response_time_ms = int((time.monotonic() - started) * 1000)

        await self.chat_repo.add_message(
            session_id,
            visitor_id,
            reply,
            "bot",
            response_time_ms=response_time_ms,
        )

        total = await self.recount(session_id)
        logger.debug(f"Session {session_id} now has {total} messages")

        return ChatResult(
            message=reply,
            session_id=str(session_id),
            visitor_id=visitor_id,
            response_time=epoch_millis(utcnow()),
        )
