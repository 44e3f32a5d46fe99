from typing import Optional, List
from uuid import UUID

from sqlalchemy import select, update, delete, func

from app.core.errors import NotFoundError
from app.db.models import ChatbotFAQ
from app.db.repositories.base import BaseRepository


class FAQRepository(BaseRepository):
    async def get_active_entries(self, category: Optional[str] = None) -> List[ChatbotFAQ]:
        query = select(ChatbotFAQ).filter(ChatbotFAQ.is_active.is_(True))
        if category:
            query = query.filter(ChatbotFAQ.category == category)
        query = query.order_by(ChatbotFAQ.priority.asc(), ChatbotFAQ.created_at.asc())
        async with self._store_call("FAQ listing"):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def count_entries(self) -> int:
        async with self._store_call("FAQ count"):
            result = await self.db.execute(select(func.count(ChatbotFAQ.id)))
            return result.scalar_one()

    async def get_entry(self, faq_id: UUID) -> ChatbotFAQ:
        async with self._store_call("FAQ lookup"):
            faq = await self.db.get(ChatbotFAQ, faq_id)
        if faq is None:
            raise NotFoundError("FAQ entry not found")
        return faq

    async def create_entry(self, **fields) -> ChatbotFAQ:
        async with self._store_call("FAQ insert"):
            faq = ChatbotFAQ(**fields)
            self.db.add(faq)
            await self.db.commit()
            await self.db.refresh(faq)
            return faq

    async def update_entry(self, faq_id: UUID, **updates) -> ChatbotFAQ:
        faq = await self.get_entry(faq_id)
        async with self._store_call("FAQ update"):
            for field, value in updates.items():
                setattr(faq, field, value)
            await self.db.commit()
            await self.db.refresh(faq)
        return faq

    async def increment_usage(self, faq_id: UUID) -> None:
        async with self._store_call("FAQ usage update"):
            await self.db.execute(
                update(ChatbotFAQ)
                .where(ChatbotFAQ.id == faq_id)
                .values(usage_count=ChatbotFAQ.usage_count + 1)
            )
            await self.db.commit()

    async def delete_entry(self, faq_id: UUID) -> None:
        await self.get_entry(faq_id)
        async with self._store_call("FAQ delete"):
            await self.db.execute(delete(ChatbotFAQ).where(ChatbotFAQ.id == faq_id))
            await self.db.commit()
