import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from personachat.core.config import settings
from personachat.core.errors import AuthenticationFailed, Forbidden
from personachat.core.roles import is_staff
from personachat.database import get_db
from personachat.models.user import User
from personachat.services.admin import AdminService
from personachat.services.auth import AuthService
from personachat.services.characters import CharacterService
from personachat.services.conversation import ConversationService
from personachat.services.llm_service import CompletionClient
from personachat.services.notifications import NotificationService
from personachat.services.ownership import require_owned_character, require_owned_message
from personachat.services.regeneration import RegenerationService
from personachat.services.users import UserService

logger = logging.getLogger(__name__)

# --- Caching Instances ---
# One completion client for the lifetime of the app; it holds the HTTP pool
_completion_client_instance = None
# --- End Caching Instances ---

bearer_scheme = HTTPBearer(auto_error=False)


def get_completion_client() -> CompletionClient:
    """
    Dependency function to get the CompletionClient instance.
    Initializes it on first call from the application settings.
    """
    global _completion_client_instance
    if _completion_client_instance is None:
        if not settings.OPENAI_API_KEY:
            logger.error("OPENAI_API_KEY is not configured")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Completion provider configuration is missing in environment variables."
            )
        try:
            _completion_client_instance = CompletionClient(
                api_key=settings.OPENAI_API_KEY,
                default_model=settings.DEFAULT_MODEL,
                timeout=settings.COMPLETION_TIMEOUT_SECONDS,
                max_retries=settings.COMPLETION_MAX_RETRIES,
                base_url=settings.OPENAI_BASE_URL,
            )
        except ConnectionError as e:
            logger.error(f"Could not initialize CompletionClient: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Could not initialize completion provider."
            )
    return _completion_client_instance


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token on the request to a user, or fail with 401/403."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationFailed("Not authenticated")
    return await AuthService(db).get_current_user(credentials.credentials)


async def require_staff(current_user: User = Depends(get_current_user)) -> User:
    """Moderators and above."""
    if not is_staff(current_user.role):
        raise Forbidden("Unauthorized. Admin access required.")
    return current_user


async def verify_character_owner(
    character_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> None:
    """
    Route-level ownership check. Declared in the route's ``dependencies`` so it
    runs before the completion client is resolved; a foreign id is a 404 even
    when the provider is not configured.
    """
    require_owned_character(db, character_id, current_user.id)


async def verify_message_owner(
    message_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> None:
    require_owned_message(db, message_id, current_user.id)


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_character_service(db: Session = Depends(get_db)) -> CharacterService:
    """
    Provides an instance of CharacterService for FastAPI dependency injection.

    A new instance is created for each request so that it always works on
    that request's database session.
    """
    return CharacterService(db=db)


def get_conversation_service(db: Session = Depends(get_db)) -> ConversationService:
    return ConversationService(db)


def get_regeneration_service(
    db: Session = Depends(get_db),
    completion_client: CompletionClient = Depends(get_completion_client),
) -> RegenerationService:
    return RegenerationService(db, completion_client)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_admin_service(
    db: Session = Depends(get_db),
    actor: User = Depends(require_staff),
) -> AdminService:
    return AdminService(db, actor)
