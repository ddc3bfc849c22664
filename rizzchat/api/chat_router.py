"""Chat API router."""

from typing import Annotated

from fastapi import APIRouter, Depends

from rizzchat.dependencies import get_conversation_service
from rizzchat.schemas.auth_schema import MessageResponse
from rizzchat.schemas.chat_schema import (
    ChatResponse,
    SendMessageRequest,
    SendMessageResponse,
    UsageResponse,
)
from rizzchat.schemas.response_schema import (
    ApiResponse,
    error_responses,
    success_response,
)
from rizzchat.services.conversation_service import ConversationService

router = APIRouter(prefix="/api", tags=["chats"])

ConversationServiceDep = Annotated[
    ConversationService, Depends(get_conversation_service)
]


@router.get("/chats", response_model=ApiResponse[list[ChatResponse]])
async def list_chats(service: ConversationServiceDep) -> dict:
    """List the caller's chats, most recently updated first."""
    result = await service.list_chats()
    return success_response(result)


@router.get(
    "/chats/{chat_id}",
    response_model=ApiResponse[ChatResponse],
    responses=error_responses(400, 404),
)
async def get_chat(chat_id: int, service: ConversationServiceDep) -> dict:
    result = await service.get_chat(chat_id)
    return success_response(result)


@router.post(
    "/chats",
    response_model=ApiResponse[ChatResponse],
    responses=error_responses(404, 429),
)
async def create_chat(service: ConversationServiceDep) -> dict:
    """Start a new empty chat; refused once the free daily quota is used up."""
    result = await service.create_chat()
    return success_response(result)


@router.post(
    "/chats/{chat_id}/messages",
    response_model=ApiResponse[SendMessageResponse],
    responses=error_responses(400, 404, 429, 502),
)
async def send_message(
    chat_id: int,
    request: SendMessageRequest,
    service: ConversationServiceDep,
) -> dict:
    """Send a user message and receive the assistant's reply."""
    result = await service.send_message(chat_id, request.message)
    return success_response(result)


@router.delete(
    "/chats/{chat_id}",
    response_model=ApiResponse[MessageResponse],
    responses=error_responses(400, 404),
)
async def delete_chat(chat_id: int, service: ConversationServiceDep) -> dict:
    await service.delete_chat(chat_id)
    return success_response(MessageResponse(message="Chat deleted successfully"))


@router.get("/usage", response_model=ApiResponse[UsageResponse])
async def get_usage(service: ConversationServiceDep) -> dict:
    """Today's free-tier message usage."""
    result = await service.get_usage()
    return success_response(result)
