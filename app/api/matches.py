"""Match listing, message history and realtime credentials."""
import logging
from typing import List
from fastapi import APIRouter, Depends, Query
from app.db.session import AsyncSessionLocal
from app.models import User
from app.services.match_service import MatchService
from app.services.message_service import MessageService
from app.services.credential_service import CredentialService
from app.schemas.match import MatchListItem, ConnectionCredentialOut
from app.schemas.message import SendMessageRequest, MessageOut, MessageWithSender
from app.schemas.user import UserOut
from app.core.rate_limiter import rate_limiter, BUCKET_MESSAGE
from app.core.exceptions import DevMatchError
from app.api.auth import require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["matches"])


@router.get("/matches", response_model=List[MatchListItem])
async def get_matches(user: User = Depends(require_user)):
    """Active matches, most recent first, each with the other member's profile."""
    async with AsyncSessionLocal() as session:
        matches = await MatchService(session).list_matches(user.id)
        unread = await MessageService(session).unread_counts(user.id, [m.id for m in matches])

        result = []
        for m in matches:
            counterpart = m.counterpart(user.id)
            result.append(MatchListItem(
                id=m.id,
                user1_id=m.user1_id,
                user2_id=m.user2_id,
                matched_at=m.matched_at,
                is_active=m.is_active,
                counterpart=UserOut.model_validate(counterpart) if counterpart else None,
                unread_count=unread.get(m.id, 0),
            ))
    return result


@router.get("/matches/{match_id}/messages", response_model=List[MessageWithSender])
async def get_messages(match_id: int, user: User = Depends(require_user)):
    """Message history, oldest first. Marks the counterpart's messages as read."""
    async with AsyncSessionLocal() as session:
        messages = await MessageService(session).list_messages(match_id, user.id)
        return [MessageWithSender.model_validate(m) for m in messages]


@router.post("/matches/{match_id}/messages", response_model=MessageOut)
async def send_message(match_id: int, body: SendMessageRequest, user: User = Depends(require_user)):
    rate_limiter.enforce(BUCKET_MESSAGE, user.id)

    try:
        async with AsyncSessionLocal() as session:
            message = await MessageService(session).send_message(match_id, user.id, body.content)
    except DevMatchError:
        rate_limiter.refund(BUCKET_MESSAGE, user.id)
        raise
    return MessageOut.model_validate(message)


@router.get("/realtime/token", response_model=ConnectionCredentialOut)
async def get_realtime_token(
    match_id: int = Query(..., alias="matchId", ge=1),
    user: User = Depends(require_user),
):
    """Signed credential for opening the realtime connection of one match."""
    async with AsyncSessionLocal() as session:
        credential = await CredentialService(session).issue_credential(user.id, match_id)
    return ConnectionCredentialOut(
        token=credential.token,
        user_id=credential.user_id,
        match_id=credential.match_id,
    )
