from contextlib import asynccontextmanager

from fastapi import FastAPI

from license_notifier.infrastructure.database import initialize_database, reset_engine
from license_notifier.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables at startup and release the engine on shutdown."""

    initialize_database()
    yield
    reset_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(title="License Expiry Notifier", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()
