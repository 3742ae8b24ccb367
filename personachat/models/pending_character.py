from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from personachat.database import Base

class PendingCharacter(Base):
    """A staged copy of a character waiting for a moderator's decision."""
    __tablename__ = "pending_characters"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    original_character_id = Column(Integer, ForeignKey("characters.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String(100), nullable=False)
    avatar = Column(String(500), nullable=True)
    system_prompt = Column(Text, nullable=True)
    personality = Column(Text, nullable=True)
    backstory = Column(Text, nullable=True)
    custom_instructions = Column(Text, nullable=True)
    status = Column(String(10), nullable=False, default="pending")
    review_note = Column(Text, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="pending_character_status_check"),
    )

    user = relationship("User", back_populates="pending_characters", foreign_keys=[user_id])
