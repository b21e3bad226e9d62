from datetime import datetime
from typing import Optional
from app.schemas.base import CamelModel
from app.schemas.user import UserOut


class MatchOut(CamelModel):
    id: int
    user1_id: str
    user2_id: str
    matched_at: Optional[datetime] = None
    is_active: bool = True


class MatchListItem(MatchOut):
    counterpart: Optional[UserOut] = None
    unread_count: int = 0


class ConnectionCredentialOut(CamelModel):
    token: str
    user_id: str
    match_id: int
