import logging
import sys

import uvicorn
from pydantic import ValidationError

from image_server.core.config import get_settings
from image_server.core.logger_config import setup_logging
from image_server.main import create_app

logger = logging.getLogger(__name__)


def main() -> None:
    setup_logging()
    try:
        settings = get_settings()
    except ValidationError as exc:
        logger.critical("Invalid configuration, refusing to start:\n%s", exc)
        sys.exit(1)

    app = create_app(settings)
    logger.info("Starting image server on %s:%d", settings.server_host, settings.server_port)
    uvicorn.run(app, host=settings.server_host, port=settings.server_port)


if __name__ == "__main__":
    main()
