"""Authentication schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Login request body."""

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=128)


class LoginResult(BaseModel):
    """Outcome of a login attempt. Failures carry ``error`` instead of raising."""

    success: bool
    username: Optional[str] = None
    error: Optional[str] = None


class SessionResponse(BaseModel):
    """Current session as seen by the client."""

    user_id: Optional[int] = None
    username: Optional[str] = None
    is_logged_in: bool = False
