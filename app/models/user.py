from sqlalchemy import Column, String, TIMESTAMP, func
from app.db.base import Base

class User(Base):
    """Identity owned by the external login provider; id is the provider's stable subject."""
    __tablename__ = "users"

    id = Column(String(255), primary_key=True)
    email = Column(String(255), unique=True)
    first_name = Column(String(255))
    last_name = Column(String(255))
    profile_image_url = Column(String(500))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), onupdate=func.now(), server_default=func.now())
