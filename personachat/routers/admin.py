import logging
from typing import List

from fastapi import APIRouter, Depends, Response

from personachat.core.dependencies import get_admin_service
from personachat.schemas.admin import (
    AdminStats,
    BlockRequest,
    PasswordResetRequest,
    PasswordResetResponse,
    RoleUpdateRequest,
    RoleUpdateResponse,
)
from personachat.schemas.auth import SuccessResponse, UserSummary
from personachat.schemas.character import PendingCharacterSchema, ReviewDecisionRequest
from personachat.services.admin import AdminService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users", response_model=List[UserSummary])
async def list_users(admin_svc: AdminService = Depends(get_admin_service)):
    return await admin_svc.list_users()


@router.get("/stats", response_model=AdminStats)
async def read_stats(admin_svc: AdminService = Depends(get_admin_service)):
    return await admin_svc.stats()


@router.patch("/users/{user_id}/role", response_model=RoleUpdateResponse)
async def update_role(
    user_id: int,
    request: RoleUpdateRequest,
    admin_svc: AdminService = Depends(get_admin_service),
):
    user = await admin_svc.update_role(user_id, request.role)
    return RoleUpdateResponse(
        message="Role updated successfully",
        user=UserSummary.model_validate(user, from_attributes=True),
    )


@router.delete("/users/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: int,
    response: Response,
    admin_svc: AdminService = Depends(get_admin_service),
):
    await admin_svc.delete_user(user_id)
    response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, proxy-revalidate"
    return SuccessResponse(message="User and all associated data deleted successfully")


@router.delete("/users", response_model=SuccessResponse)
async def delete_all_users(admin_svc: AdminService = Depends(get_admin_service)):
    removed = await admin_svc.delete_all_users()
    return SuccessResponse(message=f"{removed} users deleted")


@router.post("/users/{user_id}/reset-password", response_model=PasswordResetResponse, response_model_exclude_none=True)
async def reset_password(
    user_id: int,
    request: PasswordResetRequest = PasswordResetRequest(),
    admin_svc: AdminService = Depends(get_admin_service),
):
    temporary = await admin_svc.reset_password(user_id, request.custom_password)
    return PasswordResetResponse(temporary_password=temporary)


@router.post("/users/{user_id}/block", response_model=SuccessResponse)
async def block_user(
    user_id: int,
    request: BlockRequest,
    admin_svc: AdminService = Depends(get_admin_service),
):
    await admin_svc.block_user(user_id, request.duration)
    return SuccessResponse()


@router.post("/users/{user_id}/unblock", response_model=SuccessResponse)
async def unblock_user(user_id: int, admin_svc: AdminService = Depends(get_admin_service)):
    await admin_svc.unblock_user(user_id)
    return SuccessResponse()


@router.get("/pending-characters", response_model=List[PendingCharacterSchema])
async def list_pending_characters(admin_svc: AdminService = Depends(get_admin_service)):
    return await admin_svc.list_pending_characters()


@router.post("/pending-characters/{pending_id}/approve", response_model=PendingCharacterSchema)
async def approve_character(
    pending_id: int,
    request: ReviewDecisionRequest = ReviewDecisionRequest(),
    admin_svc: AdminService = Depends(get_admin_service),
):
    return await admin_svc.approve_character(pending_id, request.reason)


@router.post("/pending-characters/{pending_id}/reject", response_model=PendingCharacterSchema)
async def reject_character(
    pending_id: int,
    request: ReviewDecisionRequest = ReviewDecisionRequest(),
    admin_svc: AdminService = Depends(get_admin_service),
):
    return await admin_svc.reject_character(pending_id, request.reason)
