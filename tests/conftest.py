"""Shared test fixtures."""

import os

# Settings are read at import time, so configure them first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["LOG_FILE"] = ""
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("OPENAI_API_KEY", None)

from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from personachat.core.config import settings
from personachat.core.dependencies import get_completion_client
from personachat.core.errors import CompletionFailed
from personachat.core.roles import Role
from personachat.core.security import create_access_token, hash_password
from personachat.database import Base, SessionLocal, engine
from personachat.main import app
from personachat.models import Character, ChatMessage, User
from personachat.services.llm_service import Completion

PASSWORD = "Secret123"


class FakeCompletionClient:
    """Scripted stand-in for CompletionClient that records every request."""

    def __init__(self):
        self.replies: List[str] = []
        self.calls: List[Dict] = []
        self.error: Optional[Exception] = None

    async def complete(self, messages, model=None) -> Completion:
        self.calls.append({"messages": [dict(m) for m in messages], "model": model})
        if self.error is not None:
            raise self.error
        content = self.replies.pop(0) if self.replies else "fake reply"
        return Completion(content=content, model=model or settings.DEFAULT_MODEL, finish_reason="stop")

    def fail_with(self, detail: str = "provider down"):
        self.error = CompletionFailed(detail)


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def completion() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def client(completion):
    app.dependency_overrides[get_completion_client] = lambda: completion
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(db, username: str, role: Role = Role.USER, password: str = PASSWORD) -> User:
    user = User(
        email=f"{username}@example.com",
        username=username,
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


def make_character(db, user: User, name: str = "Iroh", **fields) -> Character:
    character = Character(user_id=user.id, name=name, **fields)
    db.add(character)
    db.commit()
    db.refresh(character)
    return character


def add_messages(db, character: Character, *turns) -> List[ChatMessage]:
    """``turns`` are (role, content) pairs, stored in the given order."""
    rows = []
    for role, content in turns:
        row = ChatMessage(character_id=character.id, role=role, content=content, reactions={})
        db.add(row)
        db.commit()
        db.refresh(row)
        rows.append(row)
    return rows
