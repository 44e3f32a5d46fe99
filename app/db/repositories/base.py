from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import UpstreamStoreError
from app.core.logger import logger


class BaseRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _store_call(self, operation: str):
        """Turn any database failure inside the block into an UpstreamStoreError."""
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(f"Store error during {operation}: {str(e)}", exc_info=True)
            await self.db.rollback()
            raise UpstreamStoreError(f"{operation} failed: {e}") from e
