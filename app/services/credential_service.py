from dataclasses import dataclass
from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from app.services.match_service import MatchService
from app.core.security import create_connection_token, verify_credential
from app.core.exceptions import ChannelAuthFailure
from app.core.config import settings
from app.config.constants import EMPTY_ROOM
import logging

logger = logging.getLogger(__name__)


@dataclass
class ConnectionCredential:
    token: str
    user_id: str
    match_id: int


class CredentialService:
    """Issues realtime credentials and resolves which room a new connection joins."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.match_service = MatchService(session)

    async def issue_credential(self, user_id: str, match_id: int) -> ConnectionCredential:
        await self.match_service.require_membership(match_id, user_id)
        token = create_connection_token(user_id, match_id)
        return ConnectionCredential(token=token, user_id=user_id, match_id=match_id)

    async def resolve_connection(
        self,
        token: Optional[str] = None,
        legacy_user_id: Optional[str] = None,
        legacy_match_id: Optional[str] = None,
    ) -> Tuple[str, int]:
        """
        Map connection parameters to (user_id, room_id).

        Never raises for authentication problems: anything that does not check
        out yields EMPTY_ROOM, in which no frame is ever relayed.
        """
        if token:
            try:
                user_id, match_id = verify_credential(token)
            except ChannelAuthFailure as e:
                logger.warning(f"Realtime credential rejected: {e.message}")
                return "", EMPTY_ROOM
        elif settings.REALTIME_ALLOW_LEGACY_PARAMS and legacy_user_id and legacy_match_id:
            try:
                match_id = int(legacy_match_id)
            except ValueError:
                return "", EMPTY_ROOM
            user_id = legacy_user_id
            logger.warning(f"Legacy unsigned realtime connection for user {user_id}, match {match_id}")
        else:
            return "", EMPTY_ROOM

        # A valid signature is not enough once the match has been deactivated
        if not await self.match_service.is_member(match_id, user_id):
            logger.warning(f"Realtime connection for user {user_id} refused: not a member of match {match_id}")
            return user_id, EMPTY_ROOM

        return user_id, match_id
