"""Page routes: landing, signup, login, logout, members and admin"""

import random
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import RedirectResponse

from memberauth.models.session import Session
from memberauth.utils.logger import get_logger

from .auth_deps import (
    clear_session_cookie,
    get_context,
    get_current_session,
    get_session_token,
    require_admin,
    require_session,
    set_session_cookie,
)
from .templating import render_page

logger = get_logger(__name__)

router = APIRouter(tags=["pages"])

MEMBER_IMAGES = ["cat1.svg", "cat2.svg", "cat3.svg"]


@router.get("/")
async def home(session: Optional[Session] = Depends(get_current_session)):
    if session:
        return await render_page("home.html", {
            "user": session.user,
            "message": f"Welcome, {session.user.name}!",
        })
    return await render_page("home.html", {
        "user": None,
        "message": "Please sign up or log in to continue.",
    })


@router.get("/signup")
async def signup_form():
    return await render_page("signup.html", {"message": None})


@router.post("/signup")
async def signup(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
):
    """Create an account and log it in"""
    ctx = get_context(request)
    old_token = get_session_token(request)
    session = await run_in_threadpool(ctx.auth.register, name, email, password)
    if old_token:
        await run_in_threadpool(ctx.auth.destroy_session, old_token)
    response = RedirectResponse(url="/members", status_code=303)
    set_session_cookie(request, response, session)
    return response


@router.get("/login")
async def login_form():
    return await render_page("login.html", {"message": None})


@router.post("/login")
async def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
):
    """Log in with email and password"""
    ctx = get_context(request)
    old_token = get_session_token(request)
    session = await run_in_threadpool(ctx.auth.authenticate, email, password)
    if old_token:
        await run_in_threadpool(ctx.auth.destroy_session, old_token)
    response = RedirectResponse(url="/", status_code=303)
    set_session_cookie(request, response, session)
    return response


@router.get("/logout")
async def logout(request: Request):
    """Logout and clear session"""
    ctx = get_context(request)
    token = get_session_token(request)
    await run_in_threadpool(ctx.auth.destroy_session, token)
    response = RedirectResponse(url="/", status_code=303)
    clear_session_cookie(request, response)
    return response


@router.get("/members")
async def members(session: Session = Depends(require_session)):
    return await render_page("members.html", {
        "user": session.user,
        "random_image": random.choice(MEMBER_IMAGES),
    })


@router.get("/admin")
async def admin(request: Request, session: Session = Depends(require_admin)):
    ctx = get_context(request)
    users = await run_in_threadpool(ctx.auth.list_users)
    return await render_page("admin.html", {"user": session.user, "users": users})


@router.post("/promote")
async def promote(
    request: Request,
    email: str = Form(""),
    session: Session = Depends(require_admin),
):
    ctx = get_context(request)
    await run_in_threadpool(ctx.auth.set_role, session, email, "admin")
    return RedirectResponse(url="/admin", status_code=303)


@router.post("/demote")
async def demote(
    request: Request,
    email: str = Form(""),
    session: Session = Depends(require_admin),
):
    ctx = get_context(request)
    await run_in_threadpool(ctx.auth.set_role, session, email, "user")
    return RedirectResponse(url="/admin", status_code=303)


@router.get("/api/health")
async def health():
    return {"ok": True}
