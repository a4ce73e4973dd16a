"""FastAPI application entry point"""

import logging
import sys
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from carefinder_api.api import facilities, history, providers, sms
from carefinder_api.core.config import Settings, settings as default_settings
from carefinder_api.core.services import Services, build_services
from carefinder_api.models.errors import ApplicationError

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )


async def application_error_handler(request: Request, exc: ApplicationError) -> JSONResponse:
    """Map typed application errors to their HTTP status and JSON body"""
    logger.error(f"{request.method} {request.url.path} failed: {exc.code.value} - {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.model_dump())


def create_app(services: Optional[Services] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Tests pass a prebuilt ``services``; otherwise adapters are created from
    ``settings`` (environment by default).
    """
    settings = settings or (services.settings if services else default_settings)
    services = services or build_services(settings)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
    )
    app.state.services = services

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ApplicationError, application_error_handler)

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down - closing HTTP clients")
        await app.state.services.close()

    @app.get("/")
    async def root():
        """Health check endpoint"""
        return {"status": "healthy", "version": settings.api_version}

    @app.get("/health")
    async def health():
        """Health check for monitoring"""
        return {"status": "healthy"}

    # Register API routes
    app.include_router(providers.router, prefix="/api", tags=["providers"])
    app.include_router(facilities.router, prefix="/api", tags=["facilities"])
    app.include_router(history.router, prefix="/api", tags=["history"])
    app.include_router(sms.router, prefix="/api", tags=["sms"])

    return app


def get_app() -> FastAPI:
    """uvicorn factory: `uvicorn carefinder_api.main:get_app --factory`"""
    configure_logging(default_settings.log_level)
    return create_app()
