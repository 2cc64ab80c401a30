"""
BugLab Backend — Authentication Schemas
========================================
"""

from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None)


class LoginResponse(BaseModel):
    """Body of a successful POST /auth/login (the session travels in the cookie)."""
    id: int
    email: str


class CurrentUserResponse(BaseModel):
    """
    Body of GET /auth/me.

    `name` is the linked Scientist's name, or the email when the User has no
    profile.
    """
    id: int
    name: str
    email: str
