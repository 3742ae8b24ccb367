from typing import Literal, Optional
from pydantic import BaseModel, Field

from personachat.core.roles import Role
from personachat.schemas.auth import UserSummary

BlockDuration = Literal["1h", "24h", "7d", "permanent"]

class RoleUpdateRequest(BaseModel):
    role: Role

class RoleUpdateResponse(BaseModel):
    message: str
    user: UserSummary

class PasswordResetRequest(BaseModel):
    custom_password: Optional[str] = Field(default=None, min_length=1)

class PasswordResetResponse(BaseModel):
    success: bool = True
    temporary_password: Optional[str] = None

class BlockRequest(BaseModel):
    duration: BlockDuration

class AdminStats(BaseModel):
    total_users: int
    blocked_users: int
    total_characters: int
    public_characters: int
    pending_reviews: int
    total_messages: int
