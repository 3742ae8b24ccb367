from typing import List

from fastapi import APIRouter, Depends

from personachat.core.dependencies import get_current_user, get_notification_service
from personachat.models.user import User
from personachat.schemas.auth import SuccessResponse
from personachat.schemas.notification import NotificationResponse
from personachat.services.notifications import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationResponse], summary="Newest notifications first")
async def read_notifications(
    current_user: User = Depends(get_current_user),
    notification_svc: NotificationService = Depends(get_notification_service),
):
    return await notification_svc.list_notifications(current_user.id)


@router.patch("/read-all", response_model=SuccessResponse)
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    notification_svc: NotificationService = Depends(get_notification_service),
):
    updated = await notification_svc.mark_all_read(current_user.id)
    return SuccessResponse(message=f"{updated} notifications marked as read")


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    notification_svc: NotificationService = Depends(get_notification_service),
):
    return await notification_svc.mark_read(current_user.id, notification_id)


@router.delete("/{notification_id}", response_model=SuccessResponse)
async def delete_notification(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    notification_svc: NotificationService = Depends(get_notification_service),
):
    await notification_svc.delete_notification(current_user.id, notification_id)
    return SuccessResponse()
