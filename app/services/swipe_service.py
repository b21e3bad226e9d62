from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from dataclasses import dataclass
from typing import List, Optional
from app.models.swipe import Swipe, SwipeAction, TargetType
from app.models.match import Match
from app.models.user import User
from app.services.match_service import MatchService
from app.core.exceptions import ValidationError, DuplicateActionError, NotFoundError
from app.config.constants import MAX_TARGET_ID_LENGTH
import logging

logger = logging.getLogger(__name__)

VALID_ACTIONS = {a.value for a in SwipeAction}
VALID_TARGET_TYPES = {t.value for t in TargetType}


@dataclass
class SwipeResult:
    swipe: Swipe
    match: Optional[Match] = None


class SwipeService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.match_service = MatchService(session)

    def _validate(self, swiper_id: str, target_id: str, target_type: str, action: str):
        if action not in VALID_ACTIONS:
            raise ValidationError(f"Invalid action: {action}")
        if target_type not in VALID_TARGET_TYPES:
            raise ValidationError(f"Invalid target type: {target_type}")
        if not target_id or len(target_id) > MAX_TARGET_ID_LENGTH:
            raise ValidationError("Invalid target id")
        if target_type == TargetType.DEVELOPER.value and target_id == swiper_id:
            raise ValidationError("Cannot swipe on yourself")

    async def get_swipe(self, swiper_id: str, target_id: str, target_type: str) -> Optional[Swipe]:
        stmt = select(Swipe).where(
            Swipe.swiper_id == swiper_id,
            Swipe.target_id == target_id,
            Swipe.target_type == target_type,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def record_swipe(self, swiper_id: str, target_id: str, target_type: str, action: str) -> SwipeResult:
        """
        Record a swipe and create a match when it completes a mutual like.

        The swipe row is committed before the reciprocal lookup. Of two
        near-simultaneous reciprocal likes, the one that commits last is then
        guaranteed to see the other; if both see each other, create_match
        collapses them into a single row.

        Raises:
            ValidationError: unknown action/target type, bad target id, self-swipe
            NotFoundError: developer target does not exist
            DuplicateActionError: the target was already swiped by this user
        """
        self._validate(swiper_id, target_id, target_type, action)

        if target_type == TargetType.DEVELOPER.value:
            target = await self.session.execute(select(User).where(User.id == target_id))
            if target.scalar_one_or_none() is None:
                raise NotFoundError("Target developer not found")

        existing = await self.get_swipe(swiper_id, target_id, target_type)
        if existing:
            raise DuplicateActionError()

        swipe = Swipe(
            swiper_id=swiper_id,
            target_id=target_id,
            target_type=target_type,
            action=action,
        )
        self.session.add(swipe)
        try:
            await self.session.commit()
        except IntegrityError:
            # Concurrent replay of the same swipe won the unique constraint
            await self.session.rollback()
            raise DuplicateActionError()
        await self.session.refresh(swipe)

        match = None
        if SwipeAction(action).is_positive and target_type == TargetType.DEVELOPER.value:
            reciprocal = await self.get_swipe(target_id, swiper_id, TargetType.DEVELOPER.value)
            if reciprocal and reciprocal.is_positive:
                match = await self.match_service.create_match(swiper_id, target_id)

        logger.info(
            f"Swipe {swipe.id}: {swiper_id} -> {target_type}:{target_id} ({action})"
            + (f", match {match.id}" if match else "")
        )
        return SwipeResult(swipe=swipe, match=match)

    async def list_swiped_target_ids(self, swiper_id: str, target_type: str) -> List[str]:
        """Targets already swiped by the user; a discovery feed must skip these."""
        if target_type not in VALID_TARGET_TYPES:
            raise ValidationError(f"Invalid target type: {target_type}")
        stmt = (
            select(Swipe.target_id)
            .where(Swipe.swiper_id == swiper_id, Swipe.target_type == target_type)
            .order_by(Swipe.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
