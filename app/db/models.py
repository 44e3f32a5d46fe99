import uuid
from typing import Literal

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, JSON, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.schema import Index

from app.core.utils import utcnow
from app.db.session import Base

SessionStatus = Literal["active", "ended", "archived"]
MessageType = Literal["text", "image", "file", "system"]
SenderType = Literal["user", "bot", "admin"]
SettingType = Literal["string", "number", "boolean", "json"]


class ChatbotSession(Base):
    __tablename__ = "chatbot_sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    visitor_id = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default="active")
    total_messages = Column(Integer, nullable=False, default=0)
    visitor_info = Column(JSON)
    session_start = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    session_end = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    messages = relationship(
        "ChatbotMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # Newest-active-session lookup. Not unique: concurrent first contacts may both insert
    __table_args__ = (
        Index("ix_chatbot_sessions_visitor_status_created", "visitor_id", "status", "created_at"),
    )


class ChatbotMessage(Base):
    __tablename__ = "chatbot_messages"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("chatbot_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    visitor_id = Column(String, nullable=False, index=True)
    message_type = Column(String, nullable=False, default="text")
    sender_type = Column(String, nullable=False)  # "user", "bot" or "admin"
    content = Column(Text, nullable=False)
    # "metadata" is reserved on declarative classes
    message_metadata = Column("metadata", JSON)
    response_time_ms = Column(Integer)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    session = relationship("ChatbotSession", back_populates="messages")


class ChatbotFAQ(Base):
    __tablename__ = "chatbot_faq"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    question = Column(Text, nullable=False)
    answer = Column(Text, nullable=False)
    category = Column(String, index=True)
    keywords = Column(JSON, nullable=False, default=list)
    priority = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    usage_count = Column(Integer, nullable=False, default=0)
    created_by = Column(String)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class ChatbotSetting(Base):
    __tablename__ = "chatbot_settings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    setting_key = Column(String, unique=True, nullable=False)
    setting_value = Column(Text)
    setting_type = Column(String, nullable=False, default="string")
    description = Column(Text)
    is_public = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
