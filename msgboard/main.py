"""
Main entry point for the FastAPI application.
Builds the board services, configures lifespan events and mounts routers.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from msgboard.api.routes import router as api_router
from msgboard.config.settings import settings
from msgboard.services.auth import DummyAuthProvider
from msgboard.services.sessions import SessionRegistry
from msgboard.services.store import MessageStore
from msgboard.services.websocket import ConnectionManager

# Setup Logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


# Disable these warnings as they are false positives caused by fasapi syntax
# pylint: disable=redefined-outer-name
# pylint: disable=unused-argument
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application Lifecycle Manager.
    Nothing is persisted, so shutdown only reports what is being dropped.
    """
    logger.info("Starting %s...", settings.app_name)

    yield

    logger.info("Shutting down %s, discarding %d messages", settings.app_name, len(app.state.message_store))


def create_app() -> FastAPI:
    """Factory to create the app and the services it owns."""
    application = FastAPI(
        title=settings.app_name,
        description="Authenticated Message Board API",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.state.message_store = MessageStore()
    sessions = SessionRegistry(ttl_seconds=settings.session_ttl_seconds)
    application.state.sessions = sessions
    application.state.auth_provider = DummyAuthProvider(board_password=settings.board_password)
    application.state.connections = ConnectionManager(sessions)

    # Middleware
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    application.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    application.include_router(api_router, prefix="/api")

    # Static Files (Frontend)
    try:
        application.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

        @application.get("/")
        async def root() -> FileResponse:
            return FileResponse(STATIC_DIR / "index.html")

    except RuntimeError:
        logger.warning("'%s' directory not found. UI will not be served.", STATIC_DIR)

    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.server_port)
