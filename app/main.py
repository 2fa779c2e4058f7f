import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.exceptions import AppError, StorageUnavailable, ValidationError
from app.core.logging import configure_logging
from app.db import redis as redis_store
from app.db.base import Base
from app.db.session import engine, wait_for_database
from app.routers import auth, files, status, users

logger = logging.getLogger(__name__)


def _error_response(exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.reason})


def _validation_reason(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return ValidationError.default_reason
    loc = errors[0].get("loc", ())
    field = str(loc[1]) if len(loc) > 1 else "request"
    prefix = "Missing" if errors[0].get("type") == "missing" else "Invalid"
    return f"{prefix} {field}"


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging()
    app = FastAPI(title=settings.app_name, debug=settings.debug)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppError)
    async def app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(ValidationError(_validation_reason(exc)))

    @app.exception_handler(SQLAlchemyError)
    @app.exception_handler(RedisError)
    async def store_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("store_unavailable", extra={"path": request.url.path, "error_type": type(exc).__name__})
        return _error_response(StorageUnavailable())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_error", exc_info=exc, extra={"path": request.url.path})
        return _error_response(AppError())

    app.include_router(status.router)
    app.include_router(users.router)
    app.include_router(auth.router)
    app.include_router(files.router)

    @app.on_event("startup")
    def startup() -> None:
        wait_for_database(settings.store_connect_attempts, settings.store_connect_interval_seconds)
        redis_store.wait_for_redis(settings.store_connect_attempts, settings.store_connect_interval_seconds)
        if settings.auto_create_tables:
            Base.metadata.create_all(bind=engine)

    @app.on_event("shutdown")
    def shutdown() -> None:
        redis_store.close_redis()
        engine.dispose()

    return app


app = create_app()
