from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import List, TypedDict

from app.core.utils import utcnow
from app.db.repositories.chat import ChatRepository


class DailyStats(TypedDict):
    date: str
    total_sessions: int
    total_messages: int
    unique_visitors: int
    avg_response_time_ms: float | None


def _day(moment: datetime) -> date:
    # sqlite hands back naive datetimes; everything is stored as UTC
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


async def daily_stats(chat_repo: ChatRepository, days: int = 7) -> List[DailyStats]:
    """Per-day chatbot activity for the last `days` UTC days, newest first."""
    today = utcnow().date()
    first_day = today - timedelta(days=days - 1)
    since = datetime.combine(first_day, datetime.min.time(), tzinfo=timezone.utc)

    sessions = await chat_repo.get_sessions_since(since)
    messages = await chat_repo.get_messages_since(since)

    session_counts = defaultdict(int)
    for session in sessions:
        session_counts[_day(session.created_at)] += 1

    message_counts = defaultdict(int)
    visitors = defaultdict(set)
    response_times = defaultdict(list)
    for message in messages:
        day = _day(message.created_at)
        message_counts[day] += 1
        visitors[day].add(message.visitor_id)
        if message.sender_type == "bot" and message.response_time_ms is not None:
            response_times[day].append(message.response_time_ms)

    stats = []
    for offset in range(days):
        day = today - timedelta(days=offset)
        times = response_times[day]
        stats.append(DailyStats(
            date=day.isoformat(),
            total_sessions=session_counts[day],
            total_messages=message_counts[day],
            unique_visitors=len(visitors[day]),
            avg_response_time_ms=round(sum(times) / len(times), 1) if times else None,
        ))
    return stats
