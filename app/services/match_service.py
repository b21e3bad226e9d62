from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from typing import List, Optional
from app.models.match import Match, normalize_pair
from app.core.exceptions import ForbiddenError, NotFoundError
import logging

logger = logging.getLogger(__name__)

class MatchService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_match(self, user_a: str, user_b: str) -> Match:
        """
        Insert an active match for the pair, in the order given.

        Two concurrent reciprocal swipes may both get here. The partial unique
        index on the normalized pair lets only one insert through; the loser's
        savepoint rolls back and it returns the winner's row.
        """
        low, high = normalize_pair(user_a, user_b)
        match = Match(
            user1_id=user_a,
            user2_id=user_b,
            user_low_id=low,
            user_high_id=high,
            is_active=True,
        )
        try:
            # Savepoint, so a conflict does not expire the caller's other objects
            async with self.session.begin_nested():
                self.session.add(match)
            await self.session.commit()
        except IntegrityError:
            existing = await self.find_match_between(user_a, user_b)
            if existing is None:
                raise
            logger.info(f"Match for {user_a}/{user_b} already created concurrently (id={existing.id})")
            return existing

        await self.session.refresh(match)
        logger.info(f"Created match {match.id} between {user_a} and {user_b}")
        return match

    async def find_match_between(self, user_a: str, user_b: str) -> Optional[Match]:
        """Active match for the pair in either ordering."""
        stmt = select(Match).where(
            or_(
                and_(Match.user1_id == user_a, Match.user2_id == user_b),
                and_(Match.user1_id == user_b, Match.user2_id == user_a),
            ),
            Match.is_active == True,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_matches(self, user_id: str) -> List[Match]:
        """Active matches of a user, most recent first, with both users loaded."""
        stmt = (
            select(Match)
            .options(selectinload(Match.user1), selectinload(Match.user2))
            .where(
                or_(Match.user1_id == user_id, Match.user2_id == user_id),
                Match.is_active == True,
            )
            .order_by(Match.matched_at.desc(), Match.id.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_match_by_id(self, match_id: int) -> Match:
        result = await self.session.execute(select(Match).where(Match.id == match_id))
        match = result.scalar_one_or_none()
        if not match:
            raise NotFoundError("Match not found")
        return match

    async def require_membership(self, match_id: int, user_id: str) -> Match:
        """
        Return the match if user_id is one of its members.
        Missing, inactive and foreign matches all raise the same ForbiddenError.
        """
        try:
            match = await self.get_match_by_id(match_id)
        except NotFoundError:
            raise ForbiddenError()

        if not match.is_active or not match.has_member(user_id):
            logger.warning(f"User {user_id} denied access to match {match_id}")
            raise ForbiddenError()
        return match

    async def is_member(self, match_id: int, user_id: str) -> bool:
        try:
            await self.require_membership(match_id, user_id)
        except ForbiddenError:
            return False
        return True
