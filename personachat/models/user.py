# personachat/models/user.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from personachat.database import Base
from personachat.core.roles import Role
from personachat.utils.timeutils import as_utc, utcnow

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(30), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(SAEnum(Role, name="role"), nullable=False, default=Role.USER)

    blocked = Column(Boolean, nullable=False, default=False)
    blocked_until = Column(DateTime(timezone=True), nullable=True)

    email_verified = Column(Boolean, nullable=False, default=False)
    verification_token = Column(String(64), nullable=True, unique=True, index=True)
    verification_token_expires = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    characters = relationship("Character", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    preferences = relationship("UserPreference", back_populates="user", uselist=False, cascade="all, delete-orphan", passive_deletes=True)
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    pending_characters = relationship(
        "PendingCharacter",
        back_populates="user",
        foreign_keys="PendingCharacter.user_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def is_currently_blocked(self, now=None) -> bool:
        if not self.blocked:
            return False
        # A block without an end time counts as expired; login clears it
        until = as_utc(self.blocked_until)
        return until is not None and until > (now or utcnow())

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
