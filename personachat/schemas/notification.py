from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from datetime import datetime

class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: str
    metadata: Optional[Dict[str, Any]] = Field(default=None, validation_alias="meta")
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True
        populate_by_name = True
