"""Authentication routes."""

import logging

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from armaso_pos.core.config import settings
from armaso_pos.core.rate_limit import limiter
from armaso_pos.core.security import create_session_token, revoke_session_token, verify_password
from armaso_pos.core.session import OptionalSession
from armaso_pos.db.session import DbSession
from armaso_pos.models.user import User
from armaso_pos.schemas.auth import LoginRequest, LoginResult, SessionResponse

logger = logging.getLogger("auth")

router = APIRouter()

INVALID_CREDENTIALS = "Invalid username or password"


@router.post("/login", response_model=LoginResult)
@limiter.limit("5/minute")
def login(request: Request, response: Response, login_request: LoginRequest, db: DbSession):
    """Check credentials and set the session cookie."""
    client_ip = request.client.host if request.client else "unknown"
    user = db.query(User).filter(User.username == login_request.username).first()

    if not user or not user.is_active or not verify_password(login_request.password, user.password_hash):
        logger.warning(f"Failed login attempt for username: {login_request.username} from IP: {client_ip}")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=LoginResult(success=False, error=INVALID_CREDENTIALS).model_dump(),
        )

    token = create_session_token(user.id, user.username)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=not settings.debug,
        samesite="lax",
        path="/",
    )
    logger.info(f"Successful login: {user.username} (ID: {user.id}) from IP: {client_ip}")
    return LoginResult(success=True, username=user.username)


@router.post("/logout")
@limiter.limit("30/minute")
def logout(request: Request, response: Response, session: OptionalSession):
    """Revoke the session token and clear the cookie."""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        revoke_session_token(token)
    response.delete_cookie(settings.session_cookie_name, path="/")
    if session:
        logger.info(f"User logged out: {session.username} (ID: {session.user_id})")
    return {"success": True}


@router.get("/session", response_model=SessionResponse)
@limiter.limit("120/minute")
def get_auth_session(request: Request, session: OptionalSession):
    """Report who is logged in, if anyone."""
    if session is None:
        return SessionResponse()
    return SessionResponse(user_id=session.user_id, username=session.username, is_logged_in=True)
