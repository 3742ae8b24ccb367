import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update

from personachat.core.errors import NotFound
from personachat.models.notification import Notification
from personachat.services.base import DatabaseService

logger = logging.getLogger(__name__)

__all__ = ["NotificationService"]


class NotificationService(DatabaseService):
    def _get_owned(self, user_id: int, notification_id: int) -> Notification:
        notification = self.db.scalars(
            select(Notification).where(Notification.id == notification_id, Notification.user_id == user_id)
        ).first()
        if notification is None:
            raise NotFound("Notification not found")
        return notification

    def notify(
        self,
        user_id: int,
        type: str,
        title: str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        commit: bool = True,
    ) -> Notification:
        """Queue a notification for ``user_id``; pass ``commit=False`` to join the caller's transaction."""
        notification = Notification(user_id=user_id, type=type, title=title, message=message, meta=metadata)
        self.db.add(notification)
        if commit:
            self._commit("create notification")
            self.db.refresh(notification)
        logger.debug(f"Notification '{type}' queued for user {user_id}")
        return notification

    async def list_notifications(self, user_id: int) -> List[Notification]:
        stmt = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return list(self.db.scalars(stmt))

    async def mark_read(self, user_id: int, notification_id: int) -> Notification:
        notification = self._get_owned(user_id, notification_id)
        notification.read = True
        self._commit("mark notification as read")
        self.db.refresh(notification)
        return notification

    async def mark_all_read(self, user_id: int) -> int:
        result = self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
            .values(read=True)
        )
        self._commit("mark notifications as read")
        return result.rowcount

    async def delete_notification(self, user_id: int, notification_id: int) -> None:
        notification = self._get_owned(user_id, notification_id)
        self.db.delete(notification)
        self._commit("delete notification")
