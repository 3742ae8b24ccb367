import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from personachat.core.dependencies import get_character_service, get_current_user
from personachat.core.errors import AppError
from personachat.models.user import User
from personachat.schemas.auth import SuccessResponse
from personachat.schemas.character import (
    CharacterCreateSchema,
    CharacterReorderRequest,
    CharacterResponseSchema,
    CharacterUpdateSchema,
    PendingCharacterSchema,
    PublicCharacterSchema,
)
from personachat.services.characters import CharacterService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/characters", tags=["characters"])


@router.get("", response_model=List[CharacterResponseSchema], summary="Get the current user's characters")
async def read_own_characters(
    current_user: User = Depends(get_current_user),
    char_service: CharacterService = Depends(get_character_service),
):
    return await char_service.list_characters(current_user.id)


@router.post(
    "",
    response_model=CharacterResponseSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Create a character",
)
async def create_new_character(
    character_data: CharacterCreateSchema,
    current_user: User = Depends(get_current_user),
    char_service: CharacterService = Depends(get_character_service),
):
    try:
        return await char_service.create_character(current_user.id, character_data)
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Unexpected error creating character: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal server error occurred while creating the character."
        )


@router.get("/public", response_model=List[PublicCharacterSchema], summary="Browse approved public characters")
async def read_public_characters(
    skip: int = 0,
    limit: int = 100,
    current_user: User = Depends(get_current_user),
    char_service: CharacterService = Depends(get_character_service),
):
    return await char_service.list_public_characters(skip=skip, limit=min(limit, 100))


@router.put("/reorder", response_model=List[CharacterResponseSchema], summary="Set the display order")
async def reorder_characters(
    request: CharacterReorderRequest,
    current_user: User = Depends(get_current_user),
    char_service: CharacterService = Depends(get_character_service),
):
    return await char_service.reorder_characters(current_user.id, request.character_ids)


@router.get("/{character_id}", response_model=CharacterResponseSchema, summary="Get a character by ID")
async def read_character_by_id(
    character_id: int,
    current_user: User = Depends(get_current_user),
    char_service: CharacterService = Depends(get_character_service),
):
    return await char_service.get_character(current_user.id, character_id)


@router.put("/{character_id}", response_model=CharacterResponseSchema, summary="Update a character")
async def update_existing_character(
    character_id: int,
    character_update_data: CharacterUpdateSchema,
    current_user: User = Depends(get_current_user),
    char_service: CharacterService = Depends(get_character_service),
):
    """
    Update an existing character's information.
    Only fields provided in the request body will be updated.
    """
    try:
        return await char_service.update_character(current_user.id, character_id, character_update_data)
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Unexpected error updating character {character_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal server error occurred while updating the character."
        )


@router.delete("/{character_id}", response_model=SuccessResponse, summary="Delete a character")
async def remove_character(
    character_id: int,
    current_user: User = Depends(get_current_user),
    char_service: CharacterService = Depends(get_character_service),
):
    """Delete a character together with its conversation."""
    await char_service.delete_character(current_user.id, character_id)
    return SuccessResponse()


@router.post(
    "/{character_id}/submit",
    response_model=PendingCharacterSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a character for public listing",
)
async def submit_character(
    character_id: int,
    current_user: User = Depends(get_current_user),
    char_service: CharacterService = Depends(get_character_service),
):
    return await char_service.submit_for_review(current_user.id, character_id)
