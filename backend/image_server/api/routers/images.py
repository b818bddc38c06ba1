import logging
import mimetypes
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse
from starlette.datastructures import FormData, UploadFile

from image_server.api.deps import get_storage, require_signed_url
from image_server.schemas import MessageResponse, UpdateResponse, UploadResponse
from image_server.services.storage import (
    InvalidFilenameError,
    LocalStorageService,
    StorageError,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/images",
    tags=["images"],
    dependencies=[Depends(require_signed_url)],
)

# Extensions missing from the platform table are served as generic binary
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _file_part(form: FormData) -> UploadFile:
    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File not found in the request",
        )
    return upload


def _invalid_filename() -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid filename")


def _content_disposition(filename: str) -> str:
    if filename.isascii():
        return f"inline; filename={filename}"
    return f"inline; filename*=utf-8''{quote(filename)}"


@router.post("", response_model=UploadResponse)
async def upload_image(
    request: Request,
    storage: LocalStorageService = Depends(get_storage),
) -> UploadResponse:
    async with request.form() as form:
        upload = _file_part(form)
        try:
            stored = await storage.save_new(upload.filename or "", upload.file)
        except StorageError as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
            ) from exc

    logger.info("Stored %s (%d bytes) from %r", stored.filename, stored.size, stored.original_filename)
    return UploadResponse(
        filename=stored.filename,
        original_filename=stored.original_filename,
        size=stored.size,
    )


@router.get("/{filename}")
async def read_image(
    filename: str,
    storage: LocalStorageService = Depends(get_storage),
) -> FileResponse:
    try:
        path = await storage.open_for_download(filename)
    except InvalidFilenameError:
        raise _invalid_filename() from None
    except FileNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found") from None

    content_type, _ = mimetypes.guess_type(filename)
    return FileResponse(
        path,
        media_type=content_type or DEFAULT_CONTENT_TYPE,
        headers={"Content-Disposition": _content_disposition(filename)},
    )


@router.put("/{filename}", response_model=UpdateResponse)
async def update_image(
    filename: str,
    request: Request,
    storage: LocalStorageService = Depends(get_storage),
) -> UpdateResponse:
    try:
        await storage.ensure_exists(filename)
    except InvalidFilenameError:
        raise _invalid_filename() from None
    except FileNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File Not found.") from None

    async with request.form() as form:
        upload = _file_part(form)
        try:
            size = await storage.replace(filename, upload.file)
        except StorageError as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
            ) from exc

    logger.info("Replaced %s (%d bytes)", filename, size)
    return UpdateResponse(size=size)


@router.delete("/{filename}", response_model=MessageResponse)
async def delete_image(
    filename: str,
    storage: LocalStorageService = Depends(get_storage),
) -> MessageResponse:
    try:
        await storage.delete(filename)
    except InvalidFilenameError:
        raise _invalid_filename() from None
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc

    logger.info("Removed %s", filename)
    return MessageResponse(message="File removed")
