from image_server.schemas.storage import MessageResponse, UpdateResponse, UploadResponse

__all__ = [
    "MessageResponse",
    "UploadResponse",
    "UpdateResponse",
]
