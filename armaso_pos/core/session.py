"""Cookie session dependencies for route handlers."""

from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status

from armaso_pos.core.config import settings
from armaso_pos.core.security import decode_session_token
from armaso_pos.db.session import DbSession
from armaso_pos.models.user import User


@dataclass
class SessionData:
    """The authenticated user behind a request."""

    user_id: int
    username: str
    is_logged_in: bool = True


def read_session(request: Request) -> Optional[SessionData]:
    """Decode the session cookie, or return None when absent or invalid."""
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    payload = decode_session_token(token)
    if payload is None:
        return None
    try:
        user_id = int(payload["sub"])
    except (KeyError, ValueError):
        return None
    return SessionData(user_id=user_id, username=payload.get("username", ""))


def get_current_session(request: Request, db: DbSession) -> SessionData:
    """Require a valid session for a still-active user."""
    session = read_session(request)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    user = db.get(User, session.user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is disabled",
        )
    return session


OptionalSession = Annotated[Optional[SessionData], Depends(read_session)]
CurrentSession = Annotated[SessionData, Depends(get_current_session)]
