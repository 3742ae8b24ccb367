"""
Ownership filter for characters and chat messages.

Every read or write that exposes or mutates a Character or ChatMessage goes
through one of these helpers first. A row that exists but belongs to another
user is reported exactly like a row that does not exist, so callers cannot
probe for other people's data.
"""
import logging

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from personachat.core.errors import NotFound
from personachat.models.characters import Character
from personachat.models.message import ChatMessage

logger = logging.getLogger(__name__)

__all__ = [
    "character_belongs_to_user",
    "message_belongs_to_user",
    "require_owned_character",
    "require_owned_message",
    "get_owned_character",
    "get_owned_message",
]


def character_belongs_to_user(db: Session, character_id: int, user_id: int) -> bool:
    stmt = select(
        exists().where(Character.id == character_id, Character.user_id == user_id)
    )
    return bool(db.scalar(stmt))


def message_belongs_to_user(db: Session, message_id: int, user_id: int) -> bool:
    stmt = select(
        exists()
        .where(ChatMessage.id == message_id)
        .where(ChatMessage.character_id == Character.id)
        .where(Character.user_id == user_id)
    )
    return bool(db.scalar(stmt))


def require_owned_character(db: Session, character_id: int, user_id: int) -> None:
    """Raise ``NotFound`` unless ``user_id`` owns the character; loads nothing."""
    if not character_belongs_to_user(db, character_id, user_id):
        logger.info(f"Character {character_id} not found for user {user_id}")
        raise NotFound("Character not found")


def require_owned_message(db: Session, message_id: int, user_id: int) -> None:
    if not message_belongs_to_user(db, message_id, user_id):
        logger.info(f"Message {message_id} not found for user {user_id}")
        raise NotFound("Message not found")


def get_owned_character(db: Session, character_id: int, user_id: int) -> Character:
    character = db.scalars(
        select(Character).where(Character.id == character_id, Character.user_id == user_id)
    ).first()
    if character is None:
        logger.info(f"Character {character_id} not found for user {user_id}")
        raise NotFound("Character not found")
    return character


def get_owned_message(db: Session, message_id: int, user_id: int) -> ChatMessage:
    message = db.scalars(
        select(ChatMessage)
        .join(Character, ChatMessage.character_id == Character.id)
        .where(ChatMessage.id == message_id, Character.user_id == user_id)
    ).first()
    if message is None:
        logger.info(f"Message {message_id} not found for user {user_id}")
        raise NotFound("Message not found")
    return message
