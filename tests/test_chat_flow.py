import random
import re
import uuid
from types import SimpleNamespace

import pytest

from app.core.errors import UpstreamStoreError, ValidationError
from app.core.utils import utcnow
from app.services.chat_flow import ChatFlow
from app.services.replies import CANNED_REPLIES, CannedReplyProvider


class FakeChatRepository:
    """In-memory stand-in for ChatRepository, records every write."""

    def __init__(self, fail_on_sender=None):
        self.sessions = []
        self.messages = []
        self.writes = []
        self.fail_on_sender = fail_on_sender

    async def get_active_session(self, visitor_id):
        active = [s for s in self.sessions if s.visitor_id == visitor_id and s.status == "active"]
        return active[-1] if active else None

    async def create_session(self, visitor_id, now=None):
        now = now or utcnow()
        session = SimpleNamespace(
            id=uuid.uuid4(),
            visitor_id=visitor_id,
            status="active",
            total_messages=0,
            session_start=now,
            created_at=now,
            updated_at=now,
        )
        self.sessions.append(session)
        self.writes.append("session insert")
        return session

    async def add_message(self, session_id, visitor_id, content, sender_type,
                          message_type="text", metadata=None, response_time_ms=None):
        if sender_type == self.fail_on_sender:
            raise UpstreamStoreError("simulated outage")
        message = SimpleNamespace(
            id=uuid.uuid4(),
            session_id=session_id,
            visitor_id=visitor_id,
            content=content,
            sender_type=sender_type,
            message_type=message_type,
            response_time_ms=response_time_ms,
            created_at=utcnow(),
        )
        self.messages.append(message)
        self.writes.append(f"{sender_type} message insert")
        return message

    async def count_session_messages(self, session_id):
        return sum(1 for m in self.messages if m.session_id == session_id)

    async def touch_session(self, session_id, total_messages, now=None):
        for session in self.sessions:
            if session.id == session_id:
                session.total_messages = total_messages
                session.updated_at = now or utcnow()
        self.writes.append("session update")


@pytest.fixture
def repo():
    return FakeChatRepository()


@pytest.fixture
def flow(repo):
    return ChatFlow(repo, CannedReplyProvider(random.Random(42)))


@pytest.mark.asyncio
async def test_reply_comes_from_canned_set(flow):
    for text in ["hi", "What does it cost?", "ünïcødé ✓", "x" * 2000]:
        result = await flow.process(text, "VIS_20250101_abcdefgh")
        assert result["message"] in CANNED_REPLIES


@pytest.mark.asyncio
async def test_missing_visitor_id_is_generated(flow):
    result = await flow.process("hello")
    assert re.match(r"^VIS_\d{8}_[0-9a-z]{8}$", result["visitor_id"])


@pytest.mark.asyncio
async def test_first_message_creates_one_session_with_two_messages(flow, repo):
    result = await flow.process("hello", "VIS_20250101_newvisit")

    assert len(repo.sessions) == 1
    session = repo.sessions[0]
    assert str(session.id) == result["session_id"]
    assert session.status == "active"
    assert session.total_messages == 2
    assert [m.sender_type for m in repo.messages] == ["user", "bot"]
    assert all(m.message_type == "text" for m in repo.messages)


@pytest.mark.asyncio
async def test_existing_active_session_is_reused(flow, repo):
    first = await flow.process("hello", "VIS_20250101_returnin")
    second = await flow.process("again", "VIS_20250101_returnin")

    assert first["session_id"] == second["session_id"]
    assert len(repo.sessions) == 1
    assert repo.sessions[0].total_messages == 4


@pytest.mark.asyncio
async def test_ended_session_is_not_reused(flow, repo):
    first = await flow.process("hello", "VIS_20250101_comeback")
    repo.sessions[0].status = "ended"

    second = await flow.process("back again", "VIS_20250101_comeback")

    assert second["session_id"] != first["session_id"]
    assert repo.sessions[1].total_messages == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("message", [None, "", "   \n\t "])
async def test_empty_message_is_rejected_without_writes(flow, repo, message):
    with pytest.raises(ValidationError):
        await flow.process(message, "VIS_20250101_abcdefgh")
    assert repo.writes == []


@pytest.mark.asyncio
async def test_recount_is_idempotent(flow, repo):
    result = await flow.process("hello", "VIS_20250101_counting")
    session_id = repo.sessions[0].id
    assert str(session_id) == result["session_id"]

    assert await flow.recount(session_id) == 2
    assert await flow.recount(session_id) == 2
    assert repo.sessions[0].total_messages == 2


@pytest.mark.asyncio
async def test_recount_corrects_a_stale_counter(flow, repo):
    await flow.process("hello", "VIS_20250101_staleabc")
    session = repo.sessions[0]
    session.total_messages = 99

    assert await flow.recount(session.id) == 2
    assert session.total_messages == 2


@pytest.mark.asyncio
async def test_reply_insert_failure_keeps_user_message():
    repo = FakeChatRepository(fail_on_sender="bot")
    flow = ChatFlow(repo, CannedReplyProvider())

    with pytest.raises(UpstreamStoreError):
        await flow.process("hello", "VIS_20250101_orphaned")

    assert [m.sender_type for m in repo.messages] == ["user"]
    # Aborted before the recount
    assert "session update" not in repo.writes
    assert repo.sessions[0].total_messages == 0


@pytest.mark.asyncio
async def test_bot_message_records_response_time(flow, repo):
    await flow.process("hello", "VIS_20250101_timingab")
    user_msg, bot_msg = repo.messages
    assert user_msg.response_time_ms is None
    assert bot_msg.response_time_ms is not None
    assert bot_msg.response_time_ms >= 0


@pytest.mark.asyncio
async def test_inbound_text_is_sanitized_before_storage(flow, repo):
    await flow.process("  hello\x00 there  ", "VIS_20250101_cleanups")
    assert "\x00" not in repo.messages[0].content
    assert repo.messages[0].content.startswith("hello")
