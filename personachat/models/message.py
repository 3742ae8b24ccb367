# personachat/models/message.py
from sqlalchemy import Column, Index, Integer, String, TEXT, JSON, DateTime, CheckConstraint, ForeignKey
from sqlalchemy.orm import relationship
from personachat.database import Base
from personachat.utils.timeutils import utcnow

MESSAGE_ROLES = ("system", "user", "assistant")

class ChatMessage(Base):
    """
    One turn of a character's conversation. Rows are ordered by
    (created_at, id); that order is the only sequencing the chat relies on.
    """
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True)
    character_id = Column(Integer, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(10), nullable=False) # 'user', 'assistant', 'system'
    content = Column(TEXT, nullable=False)
    reactions = Column(JSON, nullable=False, default=dict)

    # Set in Python so rows written within the same second still sort correctly
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    __table_args__ = (
        CheckConstraint("role IN ('user', 'assistant', 'system')", name="message_role_check"),
        Index('idx_chat_messages_char_id_created_at', character_id, created_at),
    )

    character = relationship("Character", back_populates="messages")

    def __repr__(self):
        return f"<ChatMessage(id={self.id}, character_id={self.character_id}, role='{self.role}')>"
