"""Session authentication and the identity provider callback."""
import hmac
import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Header, Depends
from app.db.session import AsyncSessionLocal
from app.models import User
from app.services.user_service import UserService
from app.schemas.user import UserOut, IdentityClaims, SessionOut
from app.core.security import create_session_token, verify_session_token
from app.core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


# ========================
# Auth helpers
# ========================

async def get_current_user(authorization: Optional[str] = Header(None)) -> Optional[User]:
    """Resolve the user behind a `Bearer <session token>` header."""
    if not authorization or not authorization.startswith("Bearer "):
        return None

    user_id = verify_session_token(authorization[len("Bearer "):].strip())
    if not user_id:
        logger.warning("Rejected invalid or expired session token")
        return None

    async with AsyncSessionLocal() as session:
        return await UserService(session).get_user(user_id)


def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if not user:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user


def verify_identity_secret(x_identity_secret: str = Header(None)):
    """Timing-safe check of the identity provider's shared secret."""
    expected = settings.IDENTITY_WEBHOOK_SECRET
    if not expected or not x_identity_secret:
        raise HTTPException(status_code=403, detail="Forbidden")
    if not hmac.compare_digest(x_identity_secret, expected):
        raise HTTPException(status_code=403, detail="Forbidden")
    return True


# ========================
# Endpoints
# ========================

@router.post("/identity", response_model=SessionOut)
async def identity_callback(claims: IdentityClaims, auth: bool = Depends(verify_identity_secret)):
    """Called after a successful provider login: upsert the user and open a session."""
    async with AsyncSessionLocal() as session:
        user = await UserService(session).upsert_user(
            user_id=claims.sub,
            email=claims.email,
            first_name=claims.first_name,
            last_name=claims.last_name,
            profile_image_url=claims.profile_image_url,
        )
    return SessionOut(token=create_session_token(user.id), user=UserOut.model_validate(user))


@router.get("/user", response_model=UserOut)
async def get_auth_user(user: User = Depends(require_user)):
    return UserOut.model_validate(user)
