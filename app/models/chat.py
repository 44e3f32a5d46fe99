from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.db.models import MessageType, SenderType, SessionStatus, SettingType


class ChatMessageIn(BaseModel):
    """Inbound widget message. `message` is validated by the flow so that a
    missing value is reported as a 400, like an empty one."""
    message: Optional[str] = Field(default=None, description="Visitor's message", examples=["Do you build mobile apps?"])
    visitor_id: Optional[str] = Field(default=None, description="Visitor ID kept by the widget")


class ChatReplyOut(BaseModel):
    success: bool = True
    message: str
    session_id: str
    visitor_id: str
    response_time: int = Field(..., description="Response instant, epoch milliseconds")


class MessageOut(BaseModel):
    id: UUID
    session_id: UUID
    visitor_id: str
    message_type: MessageType
    sender_type: SenderType
    content: str
    metadata: Optional[dict[str, Any]] = Field(default=None, validation_alias=AliasChoices("message_metadata", "metadata"))
    response_time_ms: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class HistoryOut(BaseModel):
    success: bool = True
    messages: List[MessageOut]
    count: int


class FAQOut(BaseModel):
    id: UUID
    question: str
    answer: str
    category: Optional[str] = None
    keywords: List[str] = []
    priority: int
    is_active: bool
    usage_count: int
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FAQListOut(BaseModel):
    success: bool = True
    faqs: List[FAQOut]


class FAQCreate(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    category: Optional[str] = None
    keywords: List[str] = []
    priority: int = 0
    is_active: bool = True


class FAQUpdate(BaseModel):
    question: Optional[str] = Field(default=None, min_length=1)
    answer: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    keywords: Optional[List[str]] = None
    priority: Optional[int] = None
    is_active: Optional[bool] = None

    # Omit a field to leave it unchanged; only category may be cleared with null
    @field_validator("question", "answer", "keywords", "priority", "is_active")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class SessionOut(BaseModel):
    id: UUID
    visitor_id: str
    status: SessionStatus
    total_messages: int
    visitor_info: Optional[dict[str, Any]] = None
    session_start: datetime
    session_end: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SettingOut(BaseModel):
    setting_key: str
    setting_value: Optional[str] = None
    setting_type: SettingType
    description: Optional[str] = None
    is_public: bool

    model_config = ConfigDict(from_attributes=True)


class SettingUpdate(BaseModel):
    setting_value: Optional[str] = None


class StatusOut(BaseModel):
    success: bool = True
    status: str


class DailyStatsOut(BaseModel):
    date: str
    total_sessions: int
    total_messages: int
    unique_visitors: int
    avg_response_time_ms: Optional[float] = None
