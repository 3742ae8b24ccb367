from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

class CharacterBaseSchema(BaseModel):
    name: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=100,
        examples=["Nelliel"],
        description="Display name of the persona."
    )
    avatar: Optional[str] = Field(default=None, max_length=500, examples=["/nel-avatar.png"])
    status: Optional[str] = Field(default=None, max_length=100, examples=["Ready to chat"])
    system_prompt: Optional[str] = Field(
        default=None,
        max_length=10000,
        examples=["You are Nelliel, a helpful and friendly AI companion."],
        description="Base instruction sent as the first system message."
    )
    personality: Optional[str] = Field(default=None, max_length=5000)
    backstory: Optional[str] = Field(default=None, max_length=10000)
    custom_instructions: Optional[str] = Field(default=None, max_length=5000)
    bookmarked: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def strip_name(cls, v: Optional[str]):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank.")
        return v

class CharacterCreateSchema(CharacterBaseSchema):
    name: str = Field(..., min_length=1, max_length=100, examples=["Zuko"])

class CharacterUpdateSchema(CharacterBaseSchema):
    pass

class CharacterResponseSchema(BaseModel):
    id: int
    user_id: int
    name: str
    avatar: Optional[str] = None
    status: Optional[str] = None
    system_prompt: Optional[str] = None
    personality: Optional[str] = None
    backstory: Optional[str] = None
    custom_instructions: Optional[str] = None
    bookmarked: bool
    is_public: bool
    review_status: str
    order: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class PublicCharacterSchema(BaseModel):
    id: int
    name: str
    avatar: Optional[str] = None
    personality: Optional[str] = None
    backstory: Optional[str] = None

    class Config:
        from_attributes = True

class CharacterReorderRequest(BaseModel):
    character_ids: List[int] = Field(..., min_length=1)

    @field_validator('character_ids')
    @classmethod
    def no_duplicates(cls, v: List[int]):
        if len(set(v)) != len(v):
            raise ValueError("character_ids must not contain duplicates.")
        return v

class PendingCharacterSchema(BaseModel):
    id: int
    user_id: int
    original_character_id: Optional[int] = None
    name: str
    avatar: Optional[str] = None
    system_prompt: Optional[str] = None
    personality: Optional[str] = None
    backstory: Optional[str] = None
    custom_instructions: Optional[str] = None
    status: str
    review_note: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class ReviewDecisionRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=1000)
