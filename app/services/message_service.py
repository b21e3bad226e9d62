from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from sqlalchemy.orm import selectinload
from typing import Dict, List
from app.models.message import Message
from app.services.match_service import MatchService
from app.core.exceptions import ValidationError
from app.config.constants import MAX_MESSAGE_LENGTH
import logging

logger = logging.getLogger(__name__)

class MessageService:
    """
    System of record for chat history. The realtime channel only mirrors what
    is sent here, so a client that missed a broadcast re-reads list_messages.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.match_service = MatchService(session)

    async def send_message(self, match_id: int, sender_id: str, content: str) -> Message:
        await self.match_service.require_membership(match_id, sender_id)

        content = (content or "").strip()
        if not content:
            raise ValidationError("Message content cannot be empty")
        if len(content) > MAX_MESSAGE_LENGTH:
            raise ValidationError(f"Message is longer than {MAX_MESSAGE_LENGTH} characters")

        # sent_at comes from the database clock, never from the client
        message = Message(match_id=match_id, sender_id=sender_id, content=content, is_read=False)
        self.session.add(message)
        await self.session.commit()
        await self.session.refresh(message)
        logger.info(f"Message {message.id} sent to match {match_id} by {sender_id}")
        return message

    async def list_messages(self, match_id: int, requesting_user_id: str) -> List[Message]:
        """
        Full history of a match, oldest first.
        Viewing the thread marks the counterpart's messages as read.
        """
        await self.match_service.require_membership(match_id, requesting_user_id)

        await self.mark_messages_read(match_id, requesting_user_id)

        stmt = (
            select(Message)
            .options(selectinload(Message.sender))
            .where(Message.match_id == match_id)
            .order_by(Message.sent_at.asc(), Message.id.asc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def mark_messages_read(self, match_id: int, reader_id: str) -> int:
        stmt = (
            update(Message)
            .where(
                Message.match_id == match_id,
                Message.sender_id != reader_id,
                Message.is_read == False,
            )
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount or 0

    async def unread_counts(self, user_id: str, match_ids: List[int]) -> Dict[int, int]:
        """Unread counterpart messages per match, in one grouped query."""
        if not match_ids:
            return {}
        stmt = (
            select(Message.match_id, func.count(Message.id))
            .where(
                Message.match_id.in_(match_ids),
                Message.sender_id != user_id,
                Message.is_read == False,
            )
            .group_by(Message.match_id)
        )
        result = await self.session.execute(stmt)
        return {match_id: count for match_id, count in result.all()}
