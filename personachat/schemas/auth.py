from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from personachat.core.roles import Role

class SignupRequest(BaseModel):
    email: str = Field(..., examples=["nel@example.com"])
    username: str = Field(..., examples=["nel_fan"])
    password: str = Field(..., examples=["Secret123"])
    confirm_password: str = Field(..., examples=["Secret123"])

class LoginRequest(BaseModel):
    identifier: str = Field(..., description="Email or username", examples=["nel_fan"])
    password: str

class VerifyEmailRequest(BaseModel):
    token: str

class Token(BaseModel):
    token: str
    token_type: str = "bearer"

class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None

class UserResponse(BaseModel):
    email: str
    username: str

class UserEmailUpdate(BaseModel):
    email: str

class PasswordChangeRequest(BaseModel):
    old_password: str
    new_password: str
    confirm_password: str

class RoleResponse(BaseModel):
    role: Role

class UserSummary(BaseModel):
    id: int
    email: str
    username: str
    role: Role
    blocked: bool
    blocked_until: Optional[datetime] = None
    email_verified: bool
    created_at: datetime
    updated_at: datetime
    character_count: int = 0

    class Config:
        from_attributes = True
