from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.core.config import Settings, get_settings
from app.core.exceptions import AppException, app_exception_handler
from app.core.logging import setup_logging
from app.infrastructure.db import DatabaseManager
from app.infrastructure.export import TabularExportManager
from app.infrastructure.storage import LocalFileStorage
from app.interfaces.http.middleware import LoggingMiddleware
from app.interfaces.http.routes import api_router
from app.utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENVIRONMENT})")

    app.state.db = DatabaseManager()
    await app.state.db.connect()

    app.state.storage = LocalFileStorage.from_settings(settings.storage)

    app.state.export_manager = TabularExportManager.from_settings(settings.export)
    if await app.state.export_manager.initialize():
        logger.info(f"Export tables ready in {settings.export.directory} (update mode: {settings.export.update_mode.value})")
    else:
        logger.warning(f"Export tables unavailable in {settings.export.directory}; writes will report failures")

    try:
        yield
    finally:
        logger.info("Shutting down...")
        await app.state.db.disconnect()


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Faculty academic-incentive submissions with CSV and Excel exports",
        version=settings.VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_settings.allowed_origins,
        allow_credentials=settings.cors_settings.allow_credentials,
        allow_methods=settings.cors_settings.allowed_methods,
        allow_headers=settings.cors_settings.allowed_headers,
    )
    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(AppException, app_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Render body/query validation failures like other 400s."""
        errors = [
            {"field": ".".join(str(part) for part in err["loc"][1:]), "message": err["msg"]}
            for err in exc.errors()
        ]
        message = f"{errors[0]['field']}: {errors[0]['message']}" if errors else "Validation failed"
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": {"type": "VALIDATION_ERROR", "message": message, "details": {"errors": errors}},
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle general exceptions."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        content = {
            "success": False,
            "error": {
                "type": "INTERNAL_SERVER_ERROR",
                "message": str(exc) if settings.DEBUG else "Internal server error occurred",
                "details": {},
            },
        }
        return JSONResponse(status_code=500, content=content)

    app.include_router(api_router, prefix="/api")

    upload_dir = Path(settings.storage.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(settings.storage.public_prefix, StaticFiles(directory=upload_dir), name="uploads")

    # Health check endpoint
    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
        }

    @app.get("/health/detailed")
    async def detailed_health_check(request: Request) -> dict:
        """Record counts and export file status."""
        exporter: TabularExportManager = request.app.state.export_manager
        return {
            "status": "healthy",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "records": await request.app.state.db.health_check(),
            "exports": {kind.value: exporter.status(kind) for kind in exporter.targets},
        }

    # Root endpoint
    @app.get("/")
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "message": "Faculty Incentive Tracker API",
            "version": settings.VERSION,
            "docs_url": "/docs",
            "health_check": "/health",
        }

    return app


setup_logging()
app = create_application()


def main():
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info" if not settings.DEBUG else "debug",
        access_log=True,
        server_header=False,
        date_header=False,
    )


if __name__ == "__main__":
    main()
