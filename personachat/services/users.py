import logging

from sqlalchemy import select

from personachat.core.errors import Forbidden, ValidationFailed
from personachat.core.security import hash_password, is_strong_password, is_valid_email, verify_password
from personachat.models.preference import UserPreference
from personachat.models.user import User
from personachat.schemas.preference import PreferenceUpdate
from personachat.services.auth import PASSWORD_RULES
from personachat.services.base import DatabaseService
from personachat.services.ownership import require_owned_character

logger = logging.getLogger(__name__)


class UserService(DatabaseService):
    """Profile and preference operations on the authenticated user."""

    async def update_email(self, user: User, email: str) -> User:
        if not is_valid_email(email):
            raise ValidationFailed("Invalid email format")
        taken = self.db.scalar(select(User.id).where(User.email == email, User.id != user.id))
        if taken is not None:
            raise ValidationFailed("Email already in use")
        user.email = email
        self._commit("update email")
        self.db.refresh(user)
        return user

    async def change_password(self, user: User, old_password: str, new_password: str, confirm_password: str) -> None:
        if new_password != confirm_password:
            raise ValidationFailed("New passwords do not match")
        if not is_strong_password(new_password):
            raise ValidationFailed(PASSWORD_RULES)
        if not verify_password(old_password, user.password_hash):
            raise Forbidden("Current password is incorrect")
        user.password_hash = hash_password(new_password)
        self._commit("change password")
        logger.info(f"Password changed for user {user.id}")

    async def get_preferences(self, user: User) -> UserPreference:
        """Return the user's preferences, creating the defaults on first access."""
        preferences = self.db.scalars(select(UserPreference).where(UserPreference.user_id == user.id)).first()
        if preferences is None:
            preferences = UserPreference(user_id=user.id)
            self.db.add(preferences)
            self._commit("create preferences")
            self.db.refresh(preferences)
            logger.info(f"Created default preferences for user {user.id}")
        return preferences

    async def update_preferences(self, user: User, update: PreferenceUpdate) -> UserPreference:
        changes = update.model_dump(exclude_unset=True)
        if changes.get("selected_char_id") is not None:
            require_owned_character(self.db, changes["selected_char_id"], user.id)
        for field in ("chat_theme", "theme", "notifications_enabled"):
            if field in changes and changes[field] is None:
                del changes[field]

        preferences = await self.get_preferences(user)
        for field, value in changes.items():
            setattr(preferences, field, value)
        self._commit("update preferences")
        self.db.refresh(preferences)
        return preferences
