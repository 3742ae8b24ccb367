# personachat/models/__init__.py

from personachat.database import Base

# Import every model so Base.metadata knows all tables
from .user import User
from .characters import Character
from .message import ChatMessage
from .pending_character import PendingCharacter
from .notification import Notification
from .preference import UserPreference
