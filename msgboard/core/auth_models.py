"""Authentication models to handle logins and user sessions"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Defines a Login request schema."""

    username: str
    password: str = Field(default="", description="Checked only when a board password is configured")


class User(BaseModel):
    """Represents a user"""

    id: UUID
    username: str
    is_authenticated: bool = False


class Session(BaseModel):
    """A bearer token issued at login, bound to a user."""

    token: str
    token_type: str = "bearer"
    user: User
    created_at: datetime
