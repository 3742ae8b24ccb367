import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func as sql_func, select

from personachat.core.errors import Conflict, Forbidden, NotFound, ValidationFailed
from personachat.core.roles import ASSIGNABLE_ROLES, Role, can_manage
from personachat.core.security import generate_temporary_password, hash_password
from personachat.models.characters import Character
from personachat.models.message import ChatMessage
from personachat.models.pending_character import PendingCharacter
from personachat.models.user import User
from personachat.schemas.admin import AdminStats
from personachat.schemas.auth import UserSummary
from personachat.services.base import DatabaseService
from personachat.services.characters import REVIEWABLE_FIELDS
from personachat.services.notifications import NotificationService
from personachat.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

__all__ = ["AdminService", "BLOCK_DURATIONS"]

# "permanent" is a far-future timestamp rather than a separate flag
BLOCK_DURATIONS = {
    "1h": timedelta(hours=1),
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "permanent": None,
}
PERMANENT_BLOCK_UNTIL = datetime(2099, 12, 31, tzinfo=timezone.utc)


class AdminService(DatabaseService):
    """
    Moderation operations. ``actor`` is the authenticated staff member; every
    action on another account requires the actor to outrank it.
    """
    def __init__(self, db, actor: User):
        super().__init__(db)
        self.actor = actor
        self.notifications = NotificationService(db)

    def _get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def _get_manageable_user(self, user_id: int, action: str) -> User:
        if user_id == self.actor.id:
            raise ValidationFailed(f"Cannot {action} your own account")
        target = self._get_user(user_id)
        if not can_manage(self.actor.role, target.role):
            logger.warning(f"User {self.actor.id} ({self.actor.role.value}) tried to {action} user {user_id} ({target.role.value})")
            raise Forbidden("You can only manage users ranked below you")
        return target

    # --- Users ---

    async def list_users(self) -> List[UserSummary]:
        counts = (
            select(Character.user_id, sql_func.count(Character.id).label("n"))
            .group_by(Character.user_id)
            .subquery()
        )
        rows: List[Tuple[User, Optional[int]]] = self.db.execute(
            select(User, counts.c.n).outerjoin(counts, counts.c.user_id == User.id).order_by(User.id)
        ).all()
        return [
            UserSummary.model_validate(user, from_attributes=True).model_copy(update={"character_count": n or 0})
            for user, n in rows
        ]

    async def stats(self) -> AdminStats:
        now = utcnow()
        users = list(self.db.scalars(select(User)))
        return AdminStats(
            total_users=len(users),
            blocked_users=sum(1 for u in users if u.is_currently_blocked(now)),
            total_characters=self.db.scalar(select(sql_func.count(Character.id))),
            public_characters=self.db.scalar(select(sql_func.count(Character.id)).where(Character.is_public.is_(True))),
            pending_reviews=self.db.scalar(
                select(sql_func.count(PendingCharacter.id)).where(PendingCharacter.status == "pending")
            ),
            total_messages=self.db.scalar(select(sql_func.count(ChatMessage.id))),
        )

    async def update_role(self, user_id: int, new_role: Role) -> User:
        new_role = Role(new_role)
        if new_role not in ASSIGNABLE_ROLES:
            raise ValidationFailed("Invalid role")
        target = self._get_user(user_id)
        if target.role == Role.SUPER_ADMIN and self.actor.role != Role.SUPER_ADMIN:
            raise Forbidden("Cannot modify SUPER_ADMIN role")
        if not can_manage(self.actor.role, target.role, new_role):
            logger.warning(
                f"Role change denied: actor={self.actor.role.value} target={target.role.value} requested={new_role.value}"
            )
            raise Forbidden("You can only modify roles below your rank")

        old_role = target.role
        target.role = new_role
        self.notifications.notify(
            target.id,
            type="role_changed",
            title="Your role has changed",
            message=f"Your role is now {new_role.value}.",
            metadata={"old_role": old_role.value, "new_role": new_role.value},
            commit=False,
        )
        self._commit("update user role")
        self.db.refresh(target)
        logger.info(f"User {target.id} role {old_role.value} -> {new_role.value} by {self.actor.id}")
        return target

    async def delete_user(self, user_id: int) -> None:
        target = self._get_manageable_user(user_id, "delete")
        # characters, messages, preferences and notifications go with it
        self.db.delete(target)
        self._commit("delete user")
        logger.info(f"User {user_id} deleted by {self.actor.id}")

    async def delete_all_users(self) -> int:
        """Delete every account ranked below the actor, in one transaction."""
        targets = [
            u for u in self.db.scalars(select(User).where(User.id != self.actor.id))
            if can_manage(self.actor.role, u.role)
        ]
        for user in targets:
            self.db.delete(user)
        self._commit("delete users")
        logger.info(f"{len(targets)} users deleted by {self.actor.id}")
        return len(targets)

    async def reset_password(self, user_id: int, custom_password: Optional[str] = None) -> Optional[str]:
        """Set a new password; returns the generated one when none was supplied."""
        target = self._get_manageable_user(user_id, "reset the password of")
        new_password = custom_password or generate_temporary_password()
        target.password_hash = hash_password(new_password)
        self._commit("reset password")
        logger.info(f"Password of user {user_id} reset by {self.actor.id} (custom={bool(custom_password)})")
        return None if custom_password else new_password

    async def block_user(self, user_id: int, duration: str) -> User:
        if duration not in BLOCK_DURATIONS:
            raise ValidationFailed("Invalid duration")
        target = self._get_manageable_user(user_id, "block")
        delta = BLOCK_DURATIONS[duration]
        target.blocked = True
        target.blocked_until = PERMANENT_BLOCK_UNTIL if delta is None else utcnow() + delta
        self._commit("block user")
        logger.info(f"User {user_id} blocked for {duration} by {self.actor.id}")
        return target

    async def unblock_user(self, user_id: int) -> User:
        target = self._get_manageable_user(user_id, "unblock")
        target.blocked = False
        target.blocked_until = None
        self._commit("unblock user")
        logger.info(f"User {user_id} unblocked by {self.actor.id}")
        return target

    # --- Character moderation ---

    async def list_pending_characters(self) -> List[PendingCharacter]:
        stmt = (
            select(PendingCharacter)
            .where(PendingCharacter.status == "pending")
            .order_by(PendingCharacter.created_at.asc(), PendingCharacter.id.asc())
        )
        return list(self.db.scalars(stmt))

    def _get_pending(self, pending_id: int) -> PendingCharacter:
        pending = self.db.get(PendingCharacter, pending_id)
        if pending is None:
            raise NotFound("Pending character not found")
        if pending.status != "pending":
            raise Conflict(f"This submission was already {pending.status}")
        return pending

    async def approve_character(self, pending_id: int, note: Optional[str] = None) -> PendingCharacter:
        """Publish the staged fields onto the original character and notify its owner."""
        pending = self._get_pending(pending_id)
        original = self.db.get(Character, pending.original_character_id) if pending.original_character_id else None
        if original is None:
            # Owner deleted the character while it waited
            raise NotFound("The submitted character no longer exists")

        for field in REVIEWABLE_FIELDS:
            setattr(original, field, getattr(pending, field))
        original.is_public = True
        original.review_status = "approved"
        pending.status = "approved"
        pending.review_note = note
        pending.reviewed_by = self.actor.id
        self.notifications.notify(
            pending.user_id,
            type="character_approved",
            title="Character approved",
            message=f"'{pending.name}' is now public.",
            metadata={"character_id": original.id},
            commit=False,
        )
        self._commit("approve character")
        self.db.refresh(pending)
        logger.info(f"Pending character {pending_id} approved by {self.actor.id}")
        return pending

    async def reject_character(self, pending_id: int, reason: Optional[str] = None) -> PendingCharacter:
        pending = self._get_pending(pending_id)
        original = self.db.get(Character, pending.original_character_id) if pending.original_character_id else None
        if original is not None:
            original.review_status = "rejected"
            original.is_public = False
        pending.status = "rejected"
        pending.review_note = reason
        pending.reviewed_by = self.actor.id
        message = f"'{pending.name}' was not approved."
        if reason:
            message += f" Reason: {reason}"
        self.notifications.notify(
            pending.user_id,
            type="character_rejected",
            title="Character rejected",
            message=message,
            metadata={"character_id": pending.original_character_id, "reason": reason},
            commit=False,
        )
        self._commit("reject character")
        self.db.refresh(pending)
        logger.info(f"Pending character {pending_id} rejected by {self.actor.id}")
        return pending
