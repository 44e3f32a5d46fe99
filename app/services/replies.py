import random
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logger import logger
from app.db.repositories.faq import FAQRepository

CANNED_REPLIES = (
    "Thank you for your message! I'm here to help you with any questions about our services.",
    "I understand your inquiry. Let me assist you with that.",
    "That's a great question! Here's what I can tell you about that.",
    "I'm here to help! Could you please provide more details about your request?",
    "Thank you for reaching out. I'll do my best to assist you.",
)


class ReplyProvider(ABC):
    """Turns an inbound visitor message into reply text."""

    name: str

    @abstractmethod
    async def generate(self, message: str) -> str:
        ...


class CannedReplyProvider(ReplyProvider):
    """Picks one of the canned replies uniformly at random, ignoring the message."""

    name = "canned"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    async def generate(self, message: str) -> str:
        return self.rng.choice(CANNED_REPLIES)


class FAQReplyProvider(ReplyProvider):
    """
    Answers with the first active FAQ entry (by priority) that has a keyword
    contained in the message, case-insensitive. Falls back to canned replies.
    """

    name = "faq"

    def __init__(self, faq_repo: FAQRepository, fallback: Optional[ReplyProvider] = None):
        self.faq_repo = faq_repo
        self.fallback = fallback or CannedReplyProvider()

    async def generate(self, message: str) -> str:
        lowered = message.lower()
        for faq in await self.faq_repo.get_active_entries():
            for keyword in faq.keywords or []:
                if keyword and keyword.lower() in lowered:
                    logger.debug(f"FAQ {faq.id} matched keyword '{keyword}'")
                    await self.faq_repo.increment_usage(faq.id)
                    return faq.answer
        return await self.fallback.generate(message)


def get_reply_provider(name: str, db: AsyncSession) -> ReplyProvider:
    if name == "canned":
        return CannedReplyProvider()
    elif name == "faq":
        return FAQReplyProvider(FAQRepository(db))
    else:
        raise ValueError(f"Unsupported reply provider: {name}")
