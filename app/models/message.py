from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, TIMESTAMP, Index, func, text
from sqlalchemy.orm import relationship, backref
from app.db.base import Base

class Message(Base):
    """Append-only chat line. is_read only ever goes false -> true."""
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    match_id = Column(Integer, ForeignKey("matches.id"), nullable=False)
    sender_id = Column(String(255), ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    sent_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    is_read = Column(Boolean, default=False, server_default=text("false"), nullable=False)

    match = relationship("Match", backref=backref("messages", order_by="Message.sent_at"))
    sender = relationship("User")

    __table_args__ = (
        Index('ix_message_match_sent', 'match_id', 'sent_at'),
    )
