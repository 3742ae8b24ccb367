import logging
from typing import List

from sqlalchemy import func as sql_func, select
from sqlalchemy.orm import Session

from personachat.core.errors import Conflict, NotFound
from personachat.models.characters import Character
from personachat.models.pending_character import PendingCharacter
from personachat.schemas.character import CharacterCreateSchema, CharacterUpdateSchema
from personachat.services.base import DatabaseService
from personachat.services.ownership import get_owned_character

logger = logging.getLogger(__name__)

__all__ = ["CharacterService", "REVIEWABLE_FIELDS"]

# Fields copied to and from a PendingCharacter during moderation
REVIEWABLE_FIELDS = ("name", "avatar", "system_prompt", "personality", "backstory", "custom_instructions")


class CharacterService(DatabaseService):
    def __init__(self, db: Session):
        """
        Initializes the CharacterService with a database session.

        Args:
            db (Session): The SQLAlchemy database session.
        """
        super().__init__(db)
        logger.debug(f"CharacterService initialized with db session: {db}")

    async def list_characters(self, user_id: int) -> List[Character]:
        """The user's characters in their chosen order, oldest first within a position."""
        stmt = (
            select(Character)
            .where(Character.user_id == user_id)
            .order_by(Character.order.asc(), Character.created_at.asc(), Character.id.asc())
        )
        return list(self.db.scalars(stmt))

    async def list_public_characters(self, skip: int = 0, limit: int = 100) -> List[Character]:
        stmt = (
            select(Character)
            .where(Character.is_public.is_(True), Character.review_status == "approved")
            .order_by(Character.name.asc(), Character.id.asc())
            .offset(skip)
            .limit(limit)
        )
        return list(self.db.scalars(stmt))

    async def get_character(self, user_id: int, character_id: int) -> Character:
        return get_owned_character(self.db, character_id, user_id)

    async def create_character(self, user_id: int, character_data: CharacterCreateSchema) -> Character:
        """
        Creates a character owned by ``user_id``, placed after the user's existing ones.

        Raises:
            PersistenceFailed: If the database write fails.
        """
        logger.info(f"Creating character '{character_data.name}' for user {user_id}")
        next_order = self.db.scalar(
            select(sql_func.coalesce(sql_func.max(Character.order) + 1, 0)).where(Character.user_id == user_id)
        )
        data = character_data.model_dump(exclude_none=True)
        db_character = Character(user_id=user_id, order=next_order, **data)
        self.db.add(db_character)
        self._commit("create character")
        self.db.refresh(db_character)
        logger.info(f"Successfully created character '{db_character.name}' with ID: {db_character.id}")
        return db_character

    async def update_character(self, user_id: int, character_id: int, update_data: CharacterUpdateSchema) -> Character:
        """Only fields present in the request body are changed."""
        db_character = get_owned_character(self.db, character_id, user_id)
        changes = update_data.model_dump(exclude_unset=True)
        # Non-nullable columns ignore an explicit null
        for field in ("name", "bookmarked"):
            if field in changes and changes[field] is None:
                del changes[field]
        for field, value in changes.items():
            setattr(db_character, field, value)
        self._commit("update character")
        self.db.refresh(db_character)
        logger.info(f"Updated character {character_id}: {sorted(changes)}")
        return db_character

    async def delete_character(self, user_id: int, character_id: int) -> None:
        """Deletes the character and, through the cascade, its messages."""
        db_character = get_owned_character(self.db, character_id, user_id)
        self.db.delete(db_character)
        self._commit("delete character")
        logger.info(f"Deleted character {character_id} of user {user_id}")

    async def reorder_characters(self, user_id: int, character_ids: List[int]) -> List[Character]:
        """Assign ``order`` by position in ``character_ids``; every id must be owned."""
        owned = {c.id: c for c in await self.list_characters(user_id)}
        unknown = [cid for cid in character_ids if cid not in owned]
        if unknown:
            logger.info(f"Reorder by user {user_id} names characters it does not own: {unknown}")
            raise NotFound("Character not found")
        for position, cid in enumerate(character_ids):
            owned[cid].order = position
        self._commit("reorder characters")
        return await self.list_characters(user_id)

    async def submit_for_review(self, user_id: int, character_id: int) -> PendingCharacter:
        """Stage a copy of the character for moderators to publish or reject."""
        db_character = get_owned_character(self.db, character_id, user_id)
        already_pending = self.db.scalar(
            select(PendingCharacter.id).where(
                PendingCharacter.original_character_id == character_id,
                PendingCharacter.status == "pending",
            )
        )
        if already_pending is not None:
            raise Conflict("This character is already awaiting review")

        pending = PendingCharacter(
            user_id=user_id,
            original_character_id=character_id,
            status="pending",
            **{field: getattr(db_character, field) for field in REVIEWABLE_FIELDS},
        )
        db_character.review_status = "pending"
        self.db.add(pending)
        self._commit("submit character for review")
        self.db.refresh(pending)
        logger.info(f"Character {character_id} submitted for review as pending entry {pending.id}")
        return pending
