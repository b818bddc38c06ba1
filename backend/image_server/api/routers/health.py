from fastapi import APIRouter

from image_server.schemas import MessageResponse

router = APIRouter(tags=["health"])


@router.get("/", response_model=MessageResponse)
async def server_status() -> MessageResponse:
    return MessageResponse(message="Server is running")
