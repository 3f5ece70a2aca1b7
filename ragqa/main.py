"""
Main FastAPI application entry point.
Responsibilities: App setup, router registration, error envelope, engine lifecycle.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__, config
from .db import create_db_engine
from .db.migrations import run_sql_migrations
from .errors import ServiceError
from .logging_config import logger
from .routes import (
    answers_router,
    questions_router,
    search_router,
    stats_router,
    upload_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the connection pool on startup and dispose of it on shutdown."""
    engine = create_db_engine()
    app.state.engine = engine

    if config.RUN_MIGRATIONS:
        try:
            logger.info("Running database migrations...")
            run_sql_migrations(engine)
            logger.info("Database migrations completed")
        except SQLAlchemyError as e:
            # Keep serving; requests report the database error themselves
            logger.error("Database migration error", exc_info=e)

    logger.info("Application started", version=__version__)
    yield

    logger.info("Application shutting down")
    engine.dispose()


# -------------------------------------------------
# App setup
# -------------------------------------------------

app = FastAPI(title="Q&A Knowledge Base", version=__version__, lifespan=lifespan)

# Register routers
app.include_router(questions_router)
app.include_router(answers_router)
app.include_router(search_router)
app.include_router(stats_router)
app.include_router(upload_router)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


# -------------------------------------------------
# Error envelope: {"success": false, "error": "..."}
# -------------------------------------------------

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("Request failed", method=request.method, path=request.url.path, exc_info=exc)
    else:
        logger.warning("Request rejected", method=request.method, path=request.url.path,
                       status=exc.status_code, error=exc.message)
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    logger.warning("Request validation failed", path=request.url.path, error=message)
    return _error_response(400, message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(exc.status_code, str(exc.detail or f"HTTP {exc.status_code}"))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error", method=request.method, path=request.url.path, exc_info=exc)
    return _error_response(500, f"Database error: {getattr(exc, 'orig', None) or exc}")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unexpected error", method=request.method, path=request.url.path, exc_info=exc)
    return _error_response(500, "Internal server error")


@app.get("/health", tags=["health"])
async def health():
    """Liveness probe; does not touch the database."""
    return {"success": True, "status": "ok"}


def run():
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("ragqa.main:app", host=config.HOST, port=config.PORT)
