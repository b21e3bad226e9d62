from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field
from app.schemas.base import CamelModel


class UserOut(CamelModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: Optional[datetime] = None


class IdentityClaims(BaseModel):
    """OIDC claims forwarded by the identity provider callback."""
    sub: str = Field(min_length=1, max_length=255)
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None


class SessionOut(CamelModel):
    token: str
    user: UserOut
