import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from image_server.api.routers import health as health_router
from image_server.api.routers import images as images_router
from image_server.core.config import Settings, get_settings
from image_server.core.logger_config import setup_logging
from image_server.services.storage import LocalStorageService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Serving files from %s", app.state.storage.base_path)
    yield


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        debug=settings.debug,
        title="Signed URL Image Server",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = LocalStorageService(settings.upload_dir_path)

    app.include_router(health_router.router)
    app.include_router(images_router.router)

    return app
