from datetime import datetime
from typing import Optional, List
from pydantic import field_validator
from app.models.swipe import SwipeAction, TargetType
from app.schemas.base import CamelModel
from app.schemas.match import MatchOut

VALID_ACTIONS = {a.value for a in SwipeAction}
VALID_TARGET_TYPES = {t.value for t in TargetType}


class SwipeRequest(CamelModel):
    target_id: str
    target_type: str
    action: str

    @field_validator("action")
    @classmethod
    def validate_action(cls, v):
        if v not in VALID_ACTIONS:
            raise ValueError(f"Invalid action: {v}")
        return v

    @field_validator("target_type")
    @classmethod
    def validate_target_type(cls, v):
        if v not in VALID_TARGET_TYPES:
            raise ValueError(f"Invalid target type: {v}")
        return v

    @field_validator("target_id")
    @classmethod
    def validate_target_id(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("Target id is required")
        return v


class SwipeOut(CamelModel):
    id: int
    swiper_id: str
    target_id: str
    target_type: str
    action: str
    created_at: Optional[datetime] = None


class SwipeResponse(CamelModel):
    swipe: SwipeOut
    match: Optional[MatchOut] = None


class SwipedTargetsResponse(CamelModel):
    target_type: str
    target_ids: List[str]
