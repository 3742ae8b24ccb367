import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select

from personachat.models.message import ChatMessage
from personachat.services.base import DatabaseService
from personachat.services.ownership import get_owned_message, require_owned_character

logger = logging.getLogger(__name__)

__all__ = ["ConversationService"]


class ConversationService(DatabaseService):
    """
    Message storage for a user's characters. Every method checks the
    message -> character -> user chain before reading or writing.
    """

    # --- Reads ---

    def get_messages(self, character_id: int) -> List[ChatMessage]:
        """All messages of a character, oldest first. Ownership must already be checked."""
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.character_id == character_id)
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
        )
        return list(self.db.scalars(stmt))

    async def list_messages(self, user_id: int, character_id: int) -> List[ChatMessage]:
        require_owned_character(self.db, character_id, user_id)
        return self.get_messages(character_id)

    # --- Writes ---

    def save_message(
        self,
        character_id: int,
        role: str,
        content: str,
        reactions: Optional[Dict[str, Any]] = None,
    ) -> ChatMessage:
        """Insert one message row. Ownership must already be checked."""
        message = ChatMessage(
            character_id=character_id,
            role=role,
            content=content,
            reactions=reactions or {},
        )
        self.db.add(message)
        self._commit("save chat message")
        self.db.refresh(message)
        logger.debug(f"Saved {role} message {message.id} for character {character_id}")
        return message

    async def add_message(
        self,
        user_id: int,
        character_id: int,
        role: str,
        content: str,
        reactions: Optional[Dict[str, Any]] = None,
    ) -> ChatMessage:
        require_owned_character(self.db, character_id, user_id)
        return self.save_message(character_id, role, content, reactions)

    async def update_message(
        self,
        user_id: int,
        message_id: int,
        content: Optional[str] = None,
        reactions: Optional[Dict[str, Any]] = None,
    ) -> ChatMessage:
        message = get_owned_message(self.db, message_id, user_id)
        if content is not None:
            message.content = content
        if reactions is not None:
            message.reactions = reactions
        self._commit("update chat message")
        self.db.refresh(message)
        return message

    async def delete_message(self, user_id: int, message_id: int) -> None:
        message = get_owned_message(self.db, message_id, user_id)
        self.db.delete(message)
        self._commit("delete chat message")
        logger.info(f"Deleted message {message_id} for user {user_id}")

    async def clear_messages(self, user_id: int, character_id: int) -> int:
        require_owned_character(self.db, character_id, user_id)
        result = self.db.execute(delete(ChatMessage).where(ChatMessage.character_id == character_id))
        self._commit("clear chat history")
        logger.info(f"Cleared {result.rowcount} messages of character {character_id}")
        return result.rowcount
