import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from . import config
from .database import Base, build_engine, build_session_factory
from .domain.scheduling.router import conflicts_router
from .domain.scheduling.router import router as schedules_router
from .domain.swaps.router import router as swap_requests_router
from .schemas import api_error, api_response
from .shared.errors import SchedulerError

# Configure logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Application starting up ({config.ENVIRONMENT})...")
    try:
        Base.metadata.create_all(bind=app.state.engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    yield
    logger.info("Application shutting down...")


def create_app(
    database_url: Optional[str] = None,
    session_factory: Optional[sessionmaker] = None,
) -> FastAPI:
    """
    Build the API around a session factory.

    Tests pass their own factory; otherwise one is built for database_url
    (or DATABASE_URL from the environment). Served with:

        uvicorn volunteer_scheduler.main:create_app --factory
    """
    if session_factory is None:
        session_factory = build_session_factory(build_engine(database_url))

    app = FastAPI(title="Volunteer Scheduler API", version="1.0.0", lifespan=lifespan)
    app.state.session_factory = session_factory
    app.state.engine = session_factory.kw["bind"]

    @app.exception_handler(SchedulerError)
    async def scheduler_exception_handler(request: Request, exc: SchedulerError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} - {type(exc).__name__}: {exc.message}")
        else:
            logger.warning(f"{request.method} {request.url.path} - {type(exc).__name__}: {exc.message}")
        return api_error(exc.message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Report body, path and query validation failures as 400 with the first problem"""
        errors = exc.errors()
        logger.warning(f"Validation error for {request.url.path}: {errors}")
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{location}: {first.get('msg')}" if location else first.get("msg")
        else:
            message = "Invalid request"
        return api_error(message, 400)

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"{request.method} {request.url.path} - Database error: {exc}")
        return api_error("Database operation failed", 500)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} - Unhandled error: {exc}")
        return api_error("Internal server error", 500)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
            raise

    logger.info(f"CORS allowed origins: {config.ALLOWED_ORIGINS}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Routes
    app.include_router(schedules_router, prefix=config.API_PREFIX)
    app.include_router(conflicts_router, prefix=config.API_PREFIX)
    app.include_router(swap_requests_router, prefix=config.API_PREFIX)

    @app.get("/health")
    def health():
        return api_response(data={"status": "healthy"})

    return app
