import enum
from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, UniqueConstraint, Index, func
from sqlalchemy.orm import relationship
from app.db.base import Base

class SwipeAction(str, enum.Enum):
    LIKE = "like"
    PASS = "pass"
    SUPER_LIKE = "super_like"

    @property
    def is_positive(self) -> bool:
        return self in (SwipeAction.LIKE, SwipeAction.SUPER_LIKE)

class TargetType(str, enum.Enum):
    DEVELOPER = "developer"
    TOOL = "tool"

class Swipe(Base):
    """One directional preference. Written once, never updated or deleted."""
    __tablename__ = "swipes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    swiper_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    target_id = Column(String(255), nullable=False)  # User id or tool id
    target_type = Column(String(20), nullable=False)
    action = Column(String(20), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    swiper = relationship("User", backref="sent_swipes")

    __table_args__ = (
        UniqueConstraint('swiper_id', 'target_id', 'target_type', name='uq_swipe_target'),
        # Reciprocity lookups go target -> swiper
        Index('ix_swipe_target', 'target_id', 'target_type'),
    )

    @property
    def is_positive(self) -> bool:
        return SwipeAction(self.action).is_positive
