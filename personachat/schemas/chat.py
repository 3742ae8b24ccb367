from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field, field_validator
from datetime import datetime

MessageRole = Literal["system", "user", "assistant"]

class MessageCreateRequest(BaseModel):
    role: MessageRole = Field(..., examples=["user"])
    content: str = Field(..., min_length=1, examples=["How do I brew the perfect cup of tea?"])
    reactions: Dict[str, Any] = Field(default_factory=dict, examples=[{"❤️": 1}])

class MessageUpdateRequest(BaseModel):
    content: Optional[str] = Field(default=None, min_length=1)
    reactions: Optional[Dict[str, Any]] = None

class GenerateRequest(BaseModel):
    model: Optional[str] = Field(
        default=None,
        description="Completion model; the configured default is used when omitted.",
        examples=["gpt-4o-mini"],
    )

    @field_validator('model')
    @classmethod
    def blank_model_to_none(cls, v: Optional[str]):
        if v is not None and not v.strip():
            return None
        return v

class ChatMessageResponse(BaseModel):
    id: int
    character_id: int
    role: MessageRole
    content: str
    reactions: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    class Config:
        from_attributes = True
