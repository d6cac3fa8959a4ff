import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from auth import router as auth_router
from auth.security import TokenConfig, TokenInvalidError, TokenIssuanceError, TokenService
from core import db
from core.log import configure_logging
from core.settings import Settings
from users import router as users_router

logger = logging.getLogger("acquisitions")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool(app.state.settings.database_url)
    try:
        yield
    finally:
        await db.close_pool()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(title="Acquisitions API", lifespan=lifespan)
    app.state.settings = settings
    # Fails fast when no secret is configured outside development.
    app.state.token_service = TokenService(TokenConfig.from_settings(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        started = time.perf_counter()
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers.update(SECURITY_HEADERS)
            return response
        finally:
            logger.info(
                "%s %s %s %.1fms",
                request.method,
                request.url.path,
                status_code,
                (time.perf_counter() - started) * 1000,
            )

    @app.exception_handler(TokenInvalidError)
    async def token_invalid_handler(_: Request, exc: TokenInvalidError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Invalid or expired token."},
        )

    @app.exception_handler(TokenIssuanceError)
    async def token_issuance_handler(_: Request, exc: TokenIssuanceError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Failed to issue token."},
        )

    app.include_router(auth_router.router, tags=["auth"])
    app.include_router(users_router.router, tags=["users"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        logger.info("Hi!, Acquisitions-api")
        return "Hello, Acquisitions!"

    return app


app = create_app()
