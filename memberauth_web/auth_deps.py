"""
FastAPI dependencies for authentication and authorization.

Every gated route goes through require_session or require_role, which defer
to AuthService.authorize.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from memberauth.app import MemberAuthApp
from memberauth.auth.service import AuthService
from memberauth.models.session import Session
from memberauth.utils.exceptions import AuthenticationRequired, ForbiddenError

authorize = AuthService.authorize


def get_context(request: Request) -> MemberAuthApp:
    return request.app.state.memberauth


def get_session_token(request: Request) -> Optional[str]:
    """Extract the session token from the session cookie"""
    cookie_name = get_context(request).settings.session.cookie_name
    return request.cookies.get(cookie_name) or None


async def get_current_session(request: Request) -> Optional[Session]:
    """Live session for this request, or None"""
    token = get_session_token(request)
    if not token:
        return None
    ctx = get_context(request)
    return await run_in_threadpool(ctx.auth.get_session, token)


async def require_session(session: Optional[Session] = Depends(get_current_session)) -> Session:
    """Dependency for members-only routes; anonymous requests go to the landing page"""
    if not authorize(session):
        raise AuthenticationRequired()
    return session


def require_role(role: str):
    """Dependency factory for role-based access control"""
    async def role_checker(session: Optional[Session] = Depends(get_current_session)) -> Session:
        if not authorize(session):
            raise AuthenticationRequired()
        if not authorize(session, role):
            raise ForbiddenError(f"Requires {role} role")
        return session

    return role_checker


def set_session_cookie(request: Request, response: Response, session: Session) -> None:
    """Attach the opaque session token as an httpOnly cookie"""
    settings = get_context(request).settings
    max_age = None if settings.session.sliding else settings.session.ttl_minutes * 60
    response.set_cookie(
        key=settings.session.cookie_name,
        value=session.session_id,
        max_age=max_age,
        httponly=True,
        secure=settings.app.is_production,
        samesite="lax",
    )


def clear_session_cookie(request: Request, response: Response) -> None:
    response.delete_cookie(key=get_context(request).settings.session.cookie_name)


require_admin = require_role("admin")
