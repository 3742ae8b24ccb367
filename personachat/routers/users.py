import logging

from fastapi import APIRouter, Depends

from personachat.core.dependencies import get_current_user, get_user_service
from personachat.models.user import User
from personachat.schemas.auth import (
    PasswordChangeRequest,
    RoleResponse,
    SuccessResponse,
    UserEmailUpdate,
    UserResponse,
)
from personachat.schemas.preference import PreferenceResponse, PreferenceUpdate
from personachat.services.users import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["user"])


@router.get("/user", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)):
    return UserResponse(email=current_user.email, username=current_user.username)


@router.put("/user", response_model=UserResponse)
async def update_email(
    request: UserEmailUpdate,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    user = await user_service.update_email(current_user, request.email)
    return UserResponse(email=user.email, username=user.username)


@router.put("/user/password", response_model=SuccessResponse)
async def change_password(
    request: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    await user_service.change_password(
        current_user, request.old_password, request.new_password, request.confirm_password
    )
    return SuccessResponse()


@router.get("/user/role", response_model=RoleResponse)
async def read_role(current_user: User = Depends(get_current_user)):
    return RoleResponse(role=current_user.role)


@router.get("/preferences", response_model=PreferenceResponse)
async def read_preferences(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.get_preferences(current_user)


@router.patch("/preferences", response_model=PreferenceResponse)
async def update_preferences(
    request: PreferenceUpdate,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.update_preferences(current_user, request)
