"""
BugLab Backend — Route Dependencies
====================================

What:  FastAPI dependency functions handing services and the current User to
       route handlers.
How:   Services live on `app.state` (built in `create_app`), so a test app
       with its own session factory gets its own service instances.
"""

from fastapi import Depends, Request

from buglab.config import Settings
from buglab.exceptions import AuthenticationRequiredError
from buglab.models.user import User
from buglab.services.assignment_service import AssignmentService
from buglab.services.bug_service import BugService
from buglab.services.profile_service import ProfileService
from buglab.services.session_service import SessionAuthenticator


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_profile_service(request: Request) -> ProfileService:
    return request.app.state.profile_service


def get_bug_service(request: Request) -> BugService:
    return request.app.state.bug_service


def get_assignment_service(request: Request) -> AssignmentService:
    return request.app.state.assignment_service


def get_session_authenticator(request: Request) -> SessionAuthenticator:
    return request.app.state.session_authenticator


def get_session_token(request: Request, settings: Settings = Depends(get_settings)) -> str | None:
    return request.cookies.get(settings.session_cookie_name)


async def get_current_user(
    token: str | None = Depends(get_session_token),
    authenticator: SessionAuthenticator = Depends(get_session_authenticator),
) -> User:
    """
    Resolve the session cookie to a User.

    Raises:
        AuthenticationRequiredError: no cookie, unknown or expired session, or
            the session's User no longer exists.
    """
    user = await authenticator.resolve(token)
    if user is None:
        raise AuthenticationRequiredError()
    return user
