"""Swipe endpoints."""
import logging
from fastapi import APIRouter, Depends, Query
from app.db.session import AsyncSessionLocal
from app.models import User
from app.models.swipe import TargetType
from app.services.swipe_service import SwipeService
from app.schemas.swipe import SwipeRequest, SwipeResponse, SwipeOut, SwipedTargetsResponse
from app.schemas.match import MatchOut
from app.core.rate_limiter import rate_limiter, BUCKET_SWIPE
from app.core.exceptions import DevMatchError
from app.api.auth import require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["swipes"])


@router.post("/swipe", response_model=SwipeResponse)
async def create_swipe(body: SwipeRequest, user: User = Depends(require_user)):
    """Record a swipe; `match` is set only when this swipe completed a mutual like."""
    rate_limiter.enforce(BUCKET_SWIPE, user.id)

    try:
        async with AsyncSessionLocal() as session:
            result = await SwipeService(session).record_swipe(
                swiper_id=user.id,
                target_id=body.target_id,
                target_type=body.target_type,
                action=body.action,
            )
    except DevMatchError:
        # Rejected swipes do not count against the quota
        rate_limiter.refund(BUCKET_SWIPE, user.id)
        raise

    return SwipeResponse(
        swipe=SwipeOut.model_validate(result.swipe),
        match=MatchOut.model_validate(result.match) if result.match else None,
    )


@router.get("/swipes/targets", response_model=SwipedTargetsResponse)
async def get_swiped_targets(
    target_type: str = Query(TargetType.DEVELOPER.value, alias="targetType"),
    user: User = Depends(require_user),
):
    """Targets the user already swiped on, for excluding them from discovery."""
    async with AsyncSessionLocal() as session:
        target_ids = await SwipeService(session).list_swiped_target_ids(user.id, target_type)
    return SwipedTargetsResponse(target_type=target_type, target_ids=target_ids)
