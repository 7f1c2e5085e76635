"""FastAPI application factory for the MemberAuth web app"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from memberauth import __version__
from memberauth.app import MemberAuthApp
from memberauth.utils.config import Settings
from memberauth.utils.exceptions import (
    AuthenticationRequired,
    DuplicateAccountError,
    ForbiddenError,
    InvalidCredentialsError,
    MemberAuthError,
    NotFoundError,
    ValidationError,
)
from memberauth.utils.logger import get_logger

from .routes import router
from .templating import render_page

logger = get_logger(__name__)

static_path = Path(__file__).parent / "static"

GENERIC_ERROR = "Something went wrong. Please try again later."

# Forms that re-render themselves with the error message inline
FORM_PAGES = {"/signup": "signup.html", "/login": "login.html"}


def _register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(AuthenticationRequired)
    async def _not_authenticated(request: Request, exc: AuthenticationRequired):
        return RedirectResponse(url="/", status_code=303)

    @app.exception_handler(InvalidCredentialsError)
    async def _invalid_credentials(request: Request, exc: InvalidCredentialsError):
        return await render_page("login.html", {"message": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(DuplicateAccountError)
    async def _duplicate(request: Request, exc: DuplicateAccountError):
        return await render_page("signup.html", {"message": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(ValidationError)
    async def _invalid_input(request: Request, exc: ValidationError):
        template = FORM_PAGES.get(request.url.path)
        if template:
            return await render_page(template, {"message": str(exc)}, status_code=exc.status_code)
        return await render_page(
            "error.html",
            {"title": "Invalid request", "message": str(exc)},
            status_code=exc.status_code,
        )

    @app.exception_handler(ForbiddenError)
    async def _forbidden(request: Request, exc: ForbiddenError):
        return await render_page("forbidden.html", {"message": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return await render_page(
            "error.html",
            {"title": "Not found", "message": str(exc)},
            status_code=exc.status_code,
        )

    @app.exception_handler(MemberAuthError)
    async def _internal(request: Request, exc: MemberAuthError):
        logger.exception("Request failed", path=request.url.path, error=str(exc))
        return await render_page(
            "error.html",
            {"title": "Error", "message": GENERIC_ERROR},
            status_code=500,
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return await render_page(
                "error.html",
                {"title": "Page not found - 404", "message": "Page not found - 404"},
                status_code=404,
            )
        return await render_page(
            "error.html",
            {"title": "Error", "message": str(exc.detail)},
            status_code=exc.status_code,
        )

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path, error=str(exc))
        return await render_page(
            "error.html",
            {"title": "Error", "message": GENERIC_ERROR},
            status_code=500,
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the web app around a fresh MemberAuthApp context"""
    context = MemberAuthApp(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        context.initialize()
        try:
            yield
        finally:
            context.shutdown()

    app = FastAPI(
        title=context.settings.app.name,
        description="Session-based signup, login and admin roles",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.memberauth = context

    _register_exception_handlers(app)
    app.mount("/static", StaticFiles(directory=static_path), name="static")
    app.include_router(router)
    return app
