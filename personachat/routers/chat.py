import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from personachat.core.dependencies import (
    get_conversation_service,
    get_current_user,
    get_regeneration_service,
    verify_character_owner,
    verify_message_owner,
)
from personachat.core.errors import AppError
from personachat.models.user import User
from personachat.schemas.auth import SuccessResponse
from personachat.schemas.chat import (
    ChatMessageResponse,
    GenerateRequest,
    MessageCreateRequest,
    MessageUpdateRequest,
)
from personachat.services.conversation import ConversationService
from personachat.services.regeneration import RegenerationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])

# Routes under /message/ are declared before /{character_id} so "message"
# is never parsed as a character id.

@router.put("/message/{message_id}", response_model=ChatMessageResponse, summary="Edit a message or its reactions")
async def update_message(
    message_id: int,
    request: MessageUpdateRequest,
    current_user: User = Depends(get_current_user),
    conversation_svc: ConversationService = Depends(get_conversation_service),
):
    return await conversation_svc.update_message(
        current_user.id, message_id, content=request.content, reactions=request.reactions
    )


@router.delete("/message/{message_id}", response_model=SuccessResponse, summary="Delete a message")
async def delete_message(
    message_id: int,
    current_user: User = Depends(get_current_user),
    conversation_svc: ConversationService = Depends(get_conversation_service),
):
    await conversation_svc.delete_message(current_user.id, message_id)
    return SuccessResponse()


@router.post(
    "/message/{message_id}/regenerate",
    response_model=ChatMessageResponse,
    summary="Regenerate an assistant message in place",
    dependencies=[Depends(verify_message_owner)],
)
async def regenerate_message(
    message_id: int,
    request: GenerateRequest = GenerateRequest(),
    current_user: User = Depends(get_current_user),
    regeneration_svc: RegenerationService = Depends(get_regeneration_service),
):
    """
    Re-run the completion over the conversation up to the last user message
    before this assistant message and overwrite its content. No row is added.
    """
    try:
        return await regeneration_svc.regenerate(current_user.id, message_id, model=request.model)
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(
            f"Unexpected error regenerating message {message_id} (stage={regeneration_svc.stage}): {e}",
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to regenerate response"
        )


@router.get("/{character_id}", response_model=List[ChatMessageResponse], summary="Conversation history")
async def get_messages(
    character_id: int,
    current_user: User = Depends(get_current_user),
    conversation_svc: ConversationService = Depends(get_conversation_service),
):
    return await conversation_svc.list_messages(current_user.id, character_id)


@router.post("/{character_id}/message", response_model=ChatMessageResponse, summary="Save a message")
async def save_message(
    character_id: int,
    request: MessageCreateRequest,
    current_user: User = Depends(get_current_user),
    conversation_svc: ConversationService = Depends(get_conversation_service),
):
    return await conversation_svc.add_message(
        current_user.id, character_id, request.role, request.content, request.reactions
    )


@router.delete("/{character_id}", response_model=SuccessResponse, summary="Clear a conversation")
async def clear_messages(
    character_id: int,
    current_user: User = Depends(get_current_user),
    conversation_svc: ConversationService = Depends(get_conversation_service),
):
    removed = await conversation_svc.clear_messages(current_user.id, character_id)
    return SuccessResponse(message=f"{removed} messages deleted")


@router.post(
    "/{character_id}/generate",
    response_model=ChatMessageResponse,
    summary="Generate the next assistant reply",
    dependencies=[Depends(verify_character_owner)],
)
async def generate_reply(
    character_id: int,
    request: GenerateRequest = GenerateRequest(),
    current_user: User = Depends(get_current_user),
    regeneration_svc: RegenerationService = Depends(get_regeneration_service),
):
    """
    Send the character's system prompt and full history to the completion
    provider and store the answer as a new assistant message.
    """
    try:
        logger.info(f"Generate request for character {character_id} by user {current_user.id}")
        return await regeneration_svc.generate_reply(current_user.id, character_id, model=request.model)
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Unexpected error generating reply for character {character_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate chat response"
        )
