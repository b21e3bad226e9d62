from datetime import datetime
from typing import Optional
from pydantic import field_validator
from app.schemas.base import CamelModel
from app.schemas.user import UserOut
from app.config.constants import MAX_MESSAGE_LENGTH


class SendMessageRequest(CamelModel):
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("Message content cannot be empty")
        if len(v) > MAX_MESSAGE_LENGTH:
            raise ValueError(f"Message is longer than {MAX_MESSAGE_LENGTH} characters")
        return v


class MessageOut(CamelModel):
    id: int
    match_id: int
    sender_id: str
    content: str
    sent_at: Optional[datetime] = None
    is_read: bool = False


class MessageWithSender(MessageOut):
    sender: Optional[UserOut] = None
