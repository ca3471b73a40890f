from typing import Any, Dict, List, Optional
from datetime import timedelta
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mindyamsanzi.core.database import Database, as_uuid, utcnow
from mindyamsanzi.core.exceptions import PersistenceError
from mindyamsanzi.models.chat_message import ChatMessage, MessageRole

logger = logging.getLogger(__name__)


class ConversationLog:
    """Append-only chat history.

    Writes are best-effort: by the time they run the reply has already been
    produced, so a failed insert is logged and reported as False instead of
    failing the request.
    """

    def __init__(self, database: Optional[Database]):
        self.database = database

    async def _append(self, student_id, rows: List[ChatMessage]) -> bool:
        if self.database is None:
            logger.info("Skipping chat persistence because no data store is configured")
            return False
        if not student_id:
            logger.info("Skipping chat persistence for anonymous caller")
            return False

        try:
            owner = as_uuid(student_id)
            for row in rows:
                row.student_id = owner
            async with self.database.session() as session:
                session.add_all(rows)
                await session.commit()
        except Exception as e:
            error = PersistenceError(f"Failed to insert chat messages: {e}")
            logger.error(str(error))
            return False

        return True

    async def append_exchange(self, student_id, user_content: str, reply: str) -> bool:
        """Store the caller's turn followed by the assistant reply"""
        now = utcnow()
        return await self._append(student_id, [
            ChatMessage(role=MessageRole.USER.value, content=user_content, created_at=now),
            # strictly later so timestamp ordering keeps the pair in order
            ChatMessage(role=MessageRole.ASSISTANT.value, content=reply, created_at=now + timedelta(microseconds=1)),
        ])

    async def append_intervention(self, student_id, reply: str, metadata: Dict[str, Any]) -> bool:
        return await self._append(student_id, [
            ChatMessage(role=MessageRole.ASSISTANT.value, content=reply, meta=metadata),
        ])

    @staticmethod
    async def history(db: AsyncSession, student_id, limit: Optional[int] = None) -> List[ChatMessage]:
        """Conversation for one student, oldest first"""
        query = (
            select(ChatMessage)
            .where(ChatMessage.student_id == as_uuid(student_id))
            .order_by(ChatMessage.created_at.asc())
        )
        if limit:
            query = query.limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())
