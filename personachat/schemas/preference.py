from typing import Optional
from pydantic import BaseModel, Field

class PreferenceResponse(BaseModel):
    user_id: int
    selected_char_id: Optional[int] = None
    chat_theme: str
    theme: str
    notifications_enabled: bool

    class Config:
        from_attributes = True

class PreferenceUpdate(BaseModel):
    chat_theme: Optional[str] = Field(default=None, min_length=1, max_length=50)
    selected_char_id: Optional[int] = None
    theme: Optional[str] = Field(default=None, min_length=1, max_length=20)
    notifications_enabled: Optional[bool] = None
