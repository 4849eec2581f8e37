"""
Application factory for the Contacts API.

``create_app`` builds the FastAPI application together with its
``Database`` handle, configures CORS, logging and the error handlers, and
includes the users and contacts routers.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import models  # noqa: F401  registers tables on Base.metadata
from . import contacts, users
from .core import Settings, configure_logging, get_settings
from .database import Database
from .exceptions import register_exception_handlers

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings (Settings | None): Explicit settings, defaults to the
            cached environment settings.

    Returns:
        FastAPI: Configured application. The database handle is available
            as ``app.state.database``.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    database = Database(settings.DATABASE_URL)
    # Create tables (for development only)
    database.create_all()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Contacts API started")
        yield
        database.dispose()
        logger.info("Contacts API stopped")

    app = FastAPI(title="Contacts API", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(users.router)
    app.include_router(contacts.router)

    @app.get("/")
    def root():
        """
        Root endpoint for the API.

        Returns:
            dict: JSON message with information about the API
        """
        return {"msg": "Contacts API. Visit /docs for Swagger UI"}

    return app
