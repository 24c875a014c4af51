import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.router import router as api_router
from .core.config import Settings, get_settings
from .core.exceptions import AppError, AuthError, InternalError, ValidationError
from .db.session import Database

logger = logging.getLogger(__name__)


def error_response(request: Request, exc: AppError) -> JSONResponse:
    """Shape an AppError into the error envelope."""
    content = {"status": "error", "message": exc.message}
    if isinstance(exc, ValidationError) and exc.errors:
        content["errors"] = exc.errors
    # Raw diagnostics only leave the process in debug mode
    if exc.detail and request.app.state.settings.DEBUG:
        content["error"] = exc.detail

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail or exc.message)
    return error_response(request, exc)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(request, ValidationError.from_error_list(exc.errors()))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return error_response(request, InternalError("Database operation failed", detail=str(exc)))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(request, InternalError(detail=str(exc)))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Open the database and create tables on startup
        db = Database(settings.DATABASE_URL, echo=settings.DB_ECHO)
        db.create_all()
        app.state.db = db
        yield
        db.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="REST API for a per-user task tracker with JWT authentication",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS middleware to allow requests from the browser client
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Include API routers
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def read_root():
        return {"status": "success", "message": settings.PROJECT_NAME}

    return app


app = create_app()
