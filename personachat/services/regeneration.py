"""
Generating new assistant replies and regenerating existing ones.

Regeneration walks three stages and stops at the first failure:

    VALIDATING  the message exists, is an assistant message and is owned
                by the caller                        -> NotFound
    GENERATING  rebuild the prompt prefix and call
                the completion provider              -> NoPriorUserMessage,
                                                        CompletionFailed
    PERSISTING  overwrite ``content`` in place       -> PersistenceFailed

Only PERSISTING writes, and it touches exactly one row. A failed write rolls
back and the generated text is dropped; the caller retries the whole action.
No lock is taken: two regenerations of the same message both call the
provider and the last commit wins.
"""
import enum
import logging
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from personachat.core.errors import PersistenceFailed, NotFound
from personachat.models.message import ChatMessage
from personachat.services.assembler import assemble_regeneration_prefix, build_generation_messages
from personachat.services.conversation import ConversationService
from personachat.services.llm_service import CompletionClient
from personachat.services.ownership import get_owned_character, get_owned_message

logger = logging.getLogger(__name__)

__all__ = ["RegenerationStage", "RegenerationService"]


class RegenerationStage(str, enum.Enum):
    VALIDATING = "validating"
    GENERATING = "generating"
    PERSISTING = "persisting"


class RegenerationService:
    def __init__(self, db: Session, completion_client: CompletionClient):
        self.db = db
        self.completion_client = completion_client
        self.conversation_svc = ConversationService(db)
        self.stage: Optional[RegenerationStage] = None

    async def generate_reply(self, user_id: int, character_id: int, model: Optional[str] = None) -> ChatMessage:
        """Answer the conversation so far with one new assistant message."""
        character = get_owned_character(self.db, character_id, user_id)
        history = self.conversation_svc.get_messages(character.id)
        messages = build_generation_messages(character, history)

        completion = await self.completion_client.complete(messages, model=model)
        saved = self.conversation_svc.save_message(character.id, "assistant", completion.content)
        logger.info(f"Generated message {saved.id} for character {character.id} with {completion.model}")
        return saved

    async def regenerate(self, user_id: int, message_id: int, model: Optional[str] = None) -> ChatMessage:
        """Replace an assistant message's content with a freshly generated one."""
        self.stage = RegenerationStage.VALIDATING
        message = get_owned_message(self.db, message_id, user_id)
        if message.role != "assistant":
            logger.info(f"Refusing to regenerate {message.role} message {message_id}")
            raise NotFound("Message not found")
        character = message.character

        self.stage = RegenerationStage.GENERATING
        history = self.conversation_svc.get_messages(character.id)
        prefix = assemble_regeneration_prefix(character, history, message.id)
        logger.debug(f"Regenerating message {message_id} from a {len(prefix)}-message prefix")
        completion = await self.completion_client.complete(prefix, model=model)

        self.stage = RegenerationStage.PERSISTING
        try:
            message.content = completion.content
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to persist regenerated message {message_id}: {e}", exc_info=True)
            raise PersistenceFailed("Failed to save regenerated message") from e
        self.db.refresh(message)
        logger.info(f"Regenerated message {message_id} with {completion.model}")
        return message
