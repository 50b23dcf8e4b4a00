"""
Main FastAPI application for the Recruiting Company API.

Builds the application, registers routers and exception handlers, and ties
the mailer and database setup to the application lifespan.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.core.config import settings
from app.core.database import DatabaseManager, SessionLocal, check_database_connection, init_db
from app.core.exceptions import RecruitingAPIError
from app.core.logging_config import setup_logging
from app.routers import api_router
from app.utils.file_storage import FileStorage
from app.utils.mailer import Mailer

logger = logging.getLogger(__name__)

PASSPORT_EXTENSIONS = (".jpg", ".jpeg", ".png")
PASSPORT_CONTENT_TYPES = ("image/jpeg", "image/jpg", "image/png")
QUIZ_EXTENSIONS = (".jpeg", ".jpg", ".png", ".webp")


def _first_error_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    error = errors[0]
    location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    message = error.get("msg", "Invalid value")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    if location:
        return f"{'.'.join(location)}: {message}"
    return message


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RecruitingAPIError)
    async def handle_app_error(request: Request, exc: RecruitingAPIError) -> JSONResponse:
        headers = None
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": _first_error_message(exc)},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )


def create_app(
    mailer: Optional[Mailer] = None,
    passport_storage: Optional[FileStorage] = None,
    quiz_storage: Optional[FileStorage] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        mailer: Outgoing mail client; built from settings when omitted.
        passport_storage: Storage for passport photos and signatures.
        quiz_storage: Storage for question images.
    """
    passport_storage = passport_storage or FileStorage(
        settings.passport_upload_dir,
        allowed_extensions=PASSPORT_EXTENSIONS,
        allowed_content_types=PASSPORT_CONTENT_TYPES,
        max_bytes=settings.MAX_PASSPORT_FILE_SIZE,
    )
    quiz_storage = quiz_storage or FileStorage(
        settings.quiz_upload_dir,
        allowed_extensions=QUIZ_EXTENSIONS,
        max_bytes=settings.MAX_QUESTION_IMAGE_SIZE,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "mailer", None) is None:
            app.state.mailer = Mailer.from_settings(settings)
        if not app.state.mailer.enabled:
            logger.warning("SMTP is not configured; emails will be logged and skipped")

        DatabaseManager.create_all_tables()
        db = SessionLocal()
        try:
            init_db(db)
        finally:
            db.close()

        logger.info("%s %s started", settings.PROJECT_NAME, settings.VERSION)
        yield
        app.state.mailer.close()
        logger.info("%s stopped", settings.PROJECT_NAME)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.DESCRIPTION,
        version=settings.VERSION,
        lifespan=lifespan,
    )
    app.state.mailer = mailer
    app.state.passport_storage = passport_storage
    app.state.quiz_storage = quiz_storage

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    app.mount("/uploads/passports", StaticFiles(directory=passport_storage.root), name="passport-uploads")
    app.mount("/uploads/quiz", StaticFiles(directory=quiz_storage.root), name="quiz-uploads")

    @app.get("/", tags=["Info"])
    def root() -> dict:
        return {"message": "Recruiting Company API - Multi-tenant System"}

    @app.get("/health", tags=["Health"])
    def health() -> dict:
        if check_database_connection():
            return {"status": "ok", "database": "connected"}
        return {"status": "degraded", "database": "unavailable"}

    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=3000, reload=settings.DEBUG)
