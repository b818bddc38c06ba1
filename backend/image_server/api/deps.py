import logging
import time

from fastapi import Depends, HTTPException, Request, status

from image_server.core.config import Settings
from image_server.core.security import TokenError, verify_signature
from image_server.services.storage import LocalStorageService

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> LocalStorageService:
    return request.app.state.storage


def get_current_time() -> int:
    return int(time.time())


async def require_signed_url(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    now: int = Depends(get_current_time),
) -> None:
    # Creation is signed over an empty filename since the name is generated later
    filename = request.path_params.get("filename", "")
    try:
        verify_signature(
            settings.secret_key,
            request.method,
            filename,
            request.query_params.get("expires"),
            request.query_params.get("signature"),
            now=now,
        )
    except TokenError as exc:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired URL",
        ) from None
