from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    message: str


class UploadResponse(BaseModel):
    message: str = "File uploaded"
    filename: str
    original_filename: str
    size: int = Field(..., ge=0)


class UpdateResponse(BaseModel):
    message: str = "File updated"
    size: int = Field(..., ge=0)
