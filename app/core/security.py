"""
HMAC-signed, stateless tokens.

Two kinds of tokens share one format, ``"{payload}.{signature}"``, where the
signature is the unpadded URL-safe base64 of HMAC-SHA256 over the salted
payload under ``SESSION_SECRET``. Each kind of token has its own salt, so one
kind never verifies as the other:

* session tokens: payload ``"{user_id}:{issued_at}"``, sent as a Bearer header
  on every API request;
* realtime connection credentials: payload ``"{user_id}:{match_id}:{issued_at}"``,
  presented once when opening the websocket.

Payloads are split from the right, so user ids may contain ``:``.
"""
import base64
import hashlib
import hmac
import time
from typing import Optional, Tuple
from app.core.config import settings
from app.core.exceptions import ChannelAuthFailure

SESSION_SALT = "session"
CREDENTIAL_SALT = "realtime"


def _signature(payload: str, secret: str, salt: str = "") -> str:
    digest = hmac.new(secret.encode(), f"{salt}|{payload}".encode(), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode().rstrip("=")


def sign(payload: str, secret: Optional[str] = None, salt: str = "") -> str:
    secret = secret or settings.SESSION_SECRET
    return f"{payload}.{_signature(payload, secret, salt)}"


def unsign(token: str, secret: Optional[str] = None, salt: str = "") -> Optional[str]:
    """Return the payload if the signature matches, else None."""
    if not token or "." not in token:
        return None
    secret = secret or settings.SESSION_SECRET
    payload, received = token.rsplit(".", 1)
    if not hmac.compare_digest(_signature(payload, secret, salt), received):
        return None
    return payload


def _is_expired(issued_at: int, ttl: int, now: Optional[float] = None) -> bool:
    if ttl <= 0:
        return False
    now = time.time() if now is None else now
    # Tokens from the future are as suspicious as stale ones
    return issued_at > now + 60 or now - issued_at > ttl


# ========================
# Session tokens
# ========================

def create_session_token(user_id: str, issued_at: Optional[int] = None) -> str:
    issued_at = int(time.time()) if issued_at is None else issued_at
    return sign(f"{user_id}:{issued_at}", salt=SESSION_SALT)


def verify_session_token(token: str) -> Optional[str]:
    """Return the user id of a valid session token, else None."""
    payload = unsign(token, salt=SESSION_SALT)
    if payload is None:
        return None
    try:
        user_id, issued_str = payload.rsplit(":", 1)
        issued_at = int(issued_str)
    except ValueError:
        return None
    if not user_id or _is_expired(issued_at, settings.SESSION_TOKEN_TTL_SECONDS):
        return None
    return user_id


# ========================
# Realtime connection credentials
# ========================

def create_connection_token(user_id: str, match_id: int, issued_at: Optional[int] = None) -> str:
    issued_at = int(time.time()) if issued_at is None else issued_at
    return sign(f"{user_id}:{match_id}:{issued_at}", salt=CREDENTIAL_SALT)


def verify_credential(token: str, now: Optional[float] = None) -> Tuple[str, int]:
    """
    Verify a realtime connection credential.

    Returns:
        (user_id, match_id)

    Raises:
        ChannelAuthFailure: bad signature, malformed payload or expired token.
    """
    payload = unsign(token, salt=CREDENTIAL_SALT)
    if payload is None:
        raise ChannelAuthFailure("Signature mismatch")

    try:
        user_id, match_str, issued_str = payload.rsplit(":", 2)
        match_id = int(match_str)
        issued_at = int(issued_str)
    except ValueError:
        raise ChannelAuthFailure("Malformed credential payload")

    if not user_id or match_id <= 0:
        raise ChannelAuthFailure("Malformed credential payload")

    if _is_expired(issued_at, settings.REALTIME_TOKEN_TTL_SECONDS, now):
        raise ChannelAuthFailure("Credential expired")

    return user_id, match_id
