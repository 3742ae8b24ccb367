import logging
from datetime import timedelta

from sqlalchemy import or_, select

from personachat.core.config import settings
from personachat.core.errors import AccountBlocked, AuthenticationFailed, ValidationFailed
from personachat.core.security import (
    create_access_token,
    generate_verification_token,
    hash_password,
    is_strong_password,
    is_valid_email,
    is_valid_username,
    verify_password,
    verify_token,
)
from personachat.models.characters import Character
from personachat.models.preference import UserPreference
from personachat.models.user import User
from personachat.schemas.auth import SignupRequest
from personachat.services.base import DatabaseService
from personachat.utils.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)

PASSWORD_RULES = (
    "Password must be at least 8 characters long and contain at least one uppercase letter, "
    "one lowercase letter, and one number"
)


class AuthService(DatabaseService):
    async def signup(self, request: SignupRequest) -> User:
        """
        Register a new account together with its default character and preferences.

        The user, the character and the preference row are committed in one
        transaction, so a failure leaves nothing behind.

        Raises:
            ValidationFailed: On malformed input or when the email/username is taken.
        """
        if not is_valid_email(request.email):
            raise ValidationFailed("Invalid email format")
        if not is_valid_username(request.username):
            raise ValidationFailed(
                "Username must be at least 3 characters long and can only contain letters, numbers, and underscores"
            )
        if request.password != request.confirm_password:
            raise ValidationFailed("Passwords do not match")
        if not is_strong_password(request.password):
            raise ValidationFailed(PASSWORD_RULES)

        existing = self.db.scalars(
            select(User).where(or_(User.email == request.email, User.username == request.username))
        ).first()
        if existing:
            if existing.email == request.email:
                raise ValidationFailed("Email already in use")
            raise ValidationFailed("Username already taken")

        user = User(
            email=request.email,
            username=request.username,
            password_hash=hash_password(request.password),
            verification_token=generate_verification_token(),
            verification_token_expires=utcnow() + timedelta(hours=settings.VERIFICATION_TOKEN_EXPIRE_HOURS),
        )
        default_character = Character(
            user=user,
            name=settings.DEFAULT_CHARACTER_NAME,
            personality="Your custom AI companion.",
            avatar="/nel-avatar.png",
            system_prompt=settings.DEFAULT_CHARACTER_PROMPT,
            custom_instructions="",
            status="Ready to chat",
        )
        self.db.add_all([user, default_character])
        self.db.flush()
        self.db.add(UserPreference(user_id=user.id, selected_char_id=default_character.id))
        self._commit("create account")
        self.db.refresh(user)
        logger.info(f"User created successfully: id={user.id}, default character {default_character.id}")
        return user

    async def login(self, identifier: str, password: str) -> str:
        """
        Exchange an email-or-username and password for a bearer token.

        Raises:
            AuthenticationFailed: Unknown user or wrong password (indistinguishable).
            AccountBlocked: The account is blocked until a future time.
        """
        user = self.db.scalars(
            select(User).where(or_(User.email == identifier, User.username == identifier))
        ).first()
        if user is None:
            logger.info("Login failed: unknown identifier")
            raise AuthenticationFailed("Invalid credentials")

        if user.blocked:
            if user.is_currently_blocked():
                raise AccountBlocked("Account blocked", blocked_until=as_utc(user.blocked_until))
            # Block has run out
            user.blocked = False
            user.blocked_until = None
            self._commit("lift expired block")
            logger.info(f"Expired block lifted for user {user.id}")

        if not verify_password(password, user.password_hash):
            logger.info(f"Login failed: wrong password for user {user.id}")
            raise AuthenticationFailed("Invalid credentials")

        logger.info(f"User {user.id} logged in")
        return create_access_token(data={"sub": str(user.id)})

    async def verify_email(self, token: str) -> User:
        user = self.db.scalars(select(User).where(User.verification_token == token)).first()
        if user is None:
            raise ValidationFailed("Invalid verification token")
        if as_utc(user.verification_token_expires) is None or as_utc(user.verification_token_expires) < utcnow():
            raise ValidationFailed("Verification token has expired")
        user.email_verified = True
        user.verification_token = None
        user.verification_token_expires = None
        self._commit("verify email")
        logger.info(f"Email verified for user {user.id}")
        return user

    async def get_current_user(self, token: str) -> User:
        """
        Resolve a bearer token to its user.

        Raises:
            AuthenticationFailed: Token invalid/expired or user no longer exists.
            AccountBlocked: The user is blocked right now.
        """
        payload = verify_token(token)
        if not payload or payload.get("sub") is None:
            raise AuthenticationFailed("Invalid token")
        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise AuthenticationFailed("Invalid token")

        user = self.db.get(User, user_id)
        if user is None:
            raise AuthenticationFailed("User no longer exists")
        if user.is_currently_blocked():
            raise AccountBlocked("Account blocked", blocked_until=as_utc(user.blocked_until))
        return user
