import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from auth import router as auth_router
from auth.security import TokenService, parse_duration
from core import db
from core.config import Settings, configure_logging, load_settings
from core.errors import install_error_handlers
from core.rate_limit import SlidingWindowLimiter
from health import router as health_router
from projects import router as projects_router

logger = logging.getLogger("api")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        # Initialize the DB pool once per process.
        await db.init_pool(
            max_size=settings.db_pool_max,
            command_timeout=settings.db_command_timeout_s,
        )
        try:
            yield
        finally:
            await db.close_pool()

    app = FastAPI(title="project-tracker", lifespan=lifespan)

    # Process-wide collaborators, built once and read by request dependencies.
    app.state.settings = settings
    app.state.token_service = TokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_in_s=parse_duration(settings.jwt_expires_in),
    )
    app.state.auth_limiter = SlidingWindowLimiter(
        max_attempts=settings.auth_rate_limit_max,
        window_s=settings.auth_rate_limit_window_s,
    )

    # Allow the frontend dev server to call this API from the browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "request method=%s path=%s status=%s ms=%.1f",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    install_error_handlers(app)

    app.include_router(health_router.router, prefix="/api", tags=["health"])
    app.include_router(auth_router.router, prefix="/api", tags=["auth"])
    app.include_router(projects_router.router, prefix="/api", tags=["projects"])

    @app.get("/")
    def root() -> dict:
        return {"message": "project-tracker api"}

    return app


_settings = load_settings()
configure_logging(_settings.log_level)
app = create_app(_settings)
