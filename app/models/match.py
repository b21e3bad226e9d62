from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, TIMESTAMP, Index, CheckConstraint, func, text
from sqlalchemy.orm import relationship
from app.db.base import Base

def normalize_pair(user_a: str, user_b: str) -> tuple:
    """Order-independent key of a user pair."""
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)

class Match(Base):
    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Stored as given by the swipe that completed the pair; no canonical order
    user1_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    user2_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    # Normalized pair, backs the one-active-match-per-pair index
    user_low_id = Column(String(255), nullable=False)
    user_high_id = Column(String(255), nullable=False)

    matched_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    is_active = Column(Boolean, default=True, server_default=text("true"), nullable=False)

    user1 = relationship("User", foreign_keys=[user1_id])
    user2 = relationship("User", foreign_keys=[user2_id])

    __table_args__ = (
        Index(
            'uq_match_active_pair', 'user_low_id', 'user_high_id',
            unique=True, postgresql_where=text("is_active"),
        ),
        CheckConstraint('user1_id <> user2_id', name='chk_match_no_self'),
    )

    def has_member(self, user_id: str) -> bool:
        return user_id in (self.user1_id, self.user2_id)

    def counterpart_id(self, user_id: str) -> str:
        return self.user2_id if user_id == self.user1_id else self.user1_id

    def counterpart(self, user_id: str):
        return self.user2 if user_id == self.user1_id else self.user1
