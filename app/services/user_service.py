from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.dialects.postgresql import insert
from typing import Optional
from app.models.user import User
import logging

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert_user(
        self,
        user_id: str,
        email: str = None,
        first_name: str = None,
        last_name: str = None,
        profile_image_url: str = None,
    ) -> User:
        """
        Create or refresh a user from identity provider claims.
        Repeated logins update the profile fields; the id never duplicates.
        """
        values = {
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "profile_image_url": profile_image_url,
        }
        stmt = (
            insert(User)
            .values(id=user_id, **values)
            .on_conflict_do_update(
                index_elements=[User.id],
                set_={**values, "updated_at": func.now()},
            )
            .returning(User)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        user = result.scalar_one()
        await self.session.commit()
        logger.info(f"Upserted user {user_id}")
        return user

    async def get_user(self, user_id: str) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
