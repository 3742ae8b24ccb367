from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from personachat.database import Base

REVIEW_STATUSES = ("private", "pending", "approved", "rejected")

class Character(Base):
    __tablename__ = "characters"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    avatar = Column(String(500), nullable=True)
    status = Column(String(100), nullable=True)
    system_prompt = Column(Text, nullable=True)
    personality = Column(Text, nullable=True)
    backstory = Column(Text, nullable=True)
    custom_instructions = Column(Text, nullable=True)
    bookmarked = Column(Boolean, nullable=False, default=False)
    is_public = Column(Boolean, nullable=False, default=False)
    review_status = Column(String(10), nullable=False, default="private")
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint(
            "review_status IN ('private', 'pending', 'approved', 'rejected')",
            name="character_review_status_check",
        ),
    )

    user = relationship("User", back_populates="characters")
    messages = relationship(
        "ChatMessage",
        back_populates="character",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Character(id={self.id}, user_id={self.user_id}, name='{self.name}')>"
