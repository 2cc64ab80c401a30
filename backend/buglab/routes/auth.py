"""
BugLab Backend — Authentication Routes
=======================================

What:  Registration, login/logout and the current-user view.
How:   Login stores a server-side session and hands its token to the browser
       in an HttpOnly cookie; logout deletes both.
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from buglab.config import Settings
from buglab.dependencies import (
    get_current_user,
    get_profile_service,
    get_session_authenticator,
    get_session_token,
    get_settings,
)
from buglab.models.user import User
from buglab.schemas.auth import CurrentUserResponse, LoginRequest, LoginResponse
from buglab.schemas.common import ErrorResponse, MessageResponse
from buglab.schemas.scientist import ScientistCreate, ScientistResponse
from buglab.services.profile_service import ProfileService
from buglab.services.session_service import SessionAuthenticator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=ScientistResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing or malformed field", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Register a user together with its scientist profile",
)
async def register(
    body: ScientistCreate,
    profiles: ProfileService = Depends(get_profile_service),
) -> ScientistResponse:
    return await profiles.register(body.name, body.email, body.password)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Email or password missing", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Log in and receive a session cookie",
)
async def login(
    body: LoginRequest,
    response: Response,
    authenticator: SessionAuthenticator = Depends(get_session_authenticator),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    user, token = await authenticator.login(body.email, body.password)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age,
        httponly=True,
        secure=settings.session_cookie_is_secure,
        samesite="lax",
    )
    return LoginResponse(id=user.id, email=user.email)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Invalidate the current session",
)
async def logout(
    response: Response,
    token: str | None = Depends(get_session_token),
    authenticator: SessionAuthenticator = Depends(get_session_authenticator),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    """Always succeeds; logging out without a session only clears the cookie."""
    await authenticator.logout(token)
    response.delete_cookie(settings.session_cookie_name)
    return MessageResponse(message="Logged out successfully")


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    responses={401: {"description": "Not authenticated", "model": ErrorResponse}},
    summary="The logged-in user",
)
async def me(
    user: User = Depends(get_current_user),
    authenticator: SessionAuthenticator = Depends(get_session_authenticator),
) -> CurrentUserResponse:
    return await authenticator.current_profile(user)
