# blogserver/main.py

import sys
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from loguru import logger
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware
from blogserver.api import auth, posts
from blogserver.api.deps import render
from blogserver.config import ConfigError, Settings
from blogserver.core.errors import (
    BlogError,
    InternalFailure,
    InvalidToken,
    LoginRequired,
    NotFound,
    UpstreamUnavailable,
)
from blogserver.core.images import ImageUploader
from blogserver.core.security import PasswordHasher
from blogserver.core.sessions import SESSION_TTL
from blogserver.database import init_db, make_engine, make_session_factory
from blogserver.log import setup_logging


BASE_DIR = Path(__file__).resolve().parent


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(LoginRequired)
    async def login_required_handler(request: Request, exc: LoginRequired):
        return RedirectResponse("/login", status_code=303)

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        return render(request, "error404.html", status_code=404)

    @app.exception_handler(InvalidToken)
    async def invalid_token_handler(request: Request, exc: InvalidToken):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(BlogError)
    async def blog_error_handler(request: Request, exc: BlogError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.opt(exception=exc).error(f"{request.method} {request.url.path} database error")
        # unreachable or timed-out store
        failure = UpstreamUnavailable() if isinstance(exc, OperationalError) else InternalFailure()
        return PlainTextResponse(failure.message, status_code=failure.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def unmatched_route_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return render(request, "error404.html", status_code=404)
        return await http_exception_handler(request, exc)


def create_app(settings: Settings | None = None, uploader: ImageUploader | None = None) -> FastAPI:
    """
    Builds the application and every long-lived collaborator it needs.
    Handlers reach them through app.state.
    """
    settings = settings or Settings.from_env()

    engine = make_engine(settings)
    init_db(engine)

    app = FastAPI()

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.uploader = uploader or ImageUploader.from_settings(settings)
    app.state.templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie="session",
        max_age=int(SESSION_TTL.total_seconds()),
        same_site="lax",
        https_only=False,
    )

    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

    app.include_router(auth.router)
    app.include_router(posts.router)

    register_exception_handlers(app)
    return app


def run():
    import uvicorn

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        print(e, file=sys.stderr)
        sys.exit(1)

    setup_logging(settings.log_level)

    if settings.database_url.startswith("sqlite:///./"):
        Path(settings.database_url.removeprefix("sqlite:///")).parent.mkdir(parents=True, exist_ok=True)

    app = create_app(settings)
    logger.info(f"Server is running on http://localhost:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
