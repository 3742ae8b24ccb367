"""Signup, login and email verification."""

from datetime import timedelta

from sqlalchemy import select

from personachat.core.config import settings
from personachat.core.security import create_access_token
from personachat.models import Character, User
from personachat.models.preference import UserPreference
from personachat.utils.timeutils import utcnow
from tests.conftest import PASSWORD, auth_headers, make_user


def signup_payload(**overrides):
    payload = {
        "email": "nel@example.com",
        "username": "nel_fan",
        "password": PASSWORD,
        "confirm_password": PASSWORD,
    }
    payload.update(overrides)
    return payload


class TestSignup:
    def test_creates_account_with_default_character(self, client, db):
        resp = client.post("/api/signup", json=signup_payload())

        assert resp.status_code == 200
        assert resp.json()["success"] is True
        user = db.scalars(select(User).where(User.username == "nel_fan")).one()
        assert user.password_hash != PASSWORD
        assert user.email_verified is False
        assert user.verification_token
        characters = db.scalars(select(Character).where(Character.user_id == user.id)).all()
        assert [c.name for c in characters] == [settings.DEFAULT_CHARACTER_NAME]
        preferences = db.scalars(select(UserPreference).where(UserPreference.user_id == user.id)).one()
        assert preferences.selected_char_id == characters[0].id

    def test_duplicate_email(self, client, db):
        make_user(db, "someone")
        resp = client.post("/api/signup", json=signup_payload(email="someone@example.com"))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Email already in use"

    def test_duplicate_username(self, client, db):
        make_user(db, "nel_fan")
        resp = client.post("/api/signup", json=signup_payload(email="other@example.com"))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Username already taken"

    def test_rejects_bad_input(self, client, db):
        assert client.post("/api/signup", json=signup_payload(email="nope")).status_code == 400
        assert client.post("/api/signup", json=signup_payload(username="a b")).status_code == 400
        assert client.post("/api/signup", json=signup_payload(confirm_password="Other1234")).status_code == 400
        assert client.post(
            "/api/signup", json=signup_payload(password="weakpass", confirm_password="weakpass")
        ).status_code == 400
        assert db.scalar(select(User.id)) is None

    def test_missing_fields(self, client):
        assert client.post("/api/signup", json={"email": "nel@example.com"}).status_code == 400


class TestLogin:
    def test_login_by_username_or_email(self, client, db):
        user = make_user(db, "alice")

        for identifier in ("alice", "alice@example.com"):
            resp = client.post("/api/login", json={"identifier": identifier, "password": PASSWORD})
            assert resp.status_code == 200
            token = resp.json()["token"]
            me = client.get("/api/user", headers={"Authorization": f"Bearer {token}"})
            assert me.json()["username"] == user.username

    def test_wrong_password_and_unknown_user_look_the_same(self, client, db):
        make_user(db, "alice")

        wrong = client.post("/api/login", json={"identifier": "alice", "password": "Wrong1234"})
        unknown = client.post("/api/login", json={"identifier": "ghost", "password": PASSWORD})

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json() == {"detail": "Invalid credentials"}

    def test_blocked_user_cannot_login(self, client, db):
        user = make_user(db, "alice")
        user.blocked = True
        user.blocked_until = utcnow() + timedelta(hours=1)
        db.commit()

        resp = client.post("/api/login", json={"identifier": "alice", "password": PASSWORD})

        assert resp.status_code == 403
        assert resp.json()["detail"] == "Account blocked"
        assert resp.json()["blocked_until"]

    def test_expired_block_is_lifted(self, client, db):
        user = make_user(db, "alice")
        user.blocked = True
        user.blocked_until = utcnow() - timedelta(minutes=1)
        db.commit()

        resp = client.post("/api/login", json={"identifier": "alice", "password": PASSWORD})

        assert resp.status_code == 200
        db.expire_all()
        assert db.get(User, user.id).blocked is False

    def test_block_without_end_time_is_lifted(self, client, db):
        user = make_user(db, "alice")
        user.blocked = True
        user.blocked_until = None
        db.commit()

        resp = client.post("/api/login", json={"identifier": "alice", "password": PASSWORD})

        assert resp.status_code == 200
        db.expire_all()
        assert db.get(User, user.id).blocked is False


class TestTokens:
    def test_missing_token(self, client):
        resp = client.get("/api/user")
        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    def test_token_for_deleted_user(self, client, db):
        user = make_user(db, "alice")
        headers = auth_headers(user)
        db.delete(user)
        db.commit()
        assert client.get("/api/user", headers=headers).status_code == 401

    def test_non_numeric_subject(self, client):
        token = create_access_token({"sub": "alice"})
        assert client.get("/api/user", headers={"Authorization": f"Bearer {token}"}).status_code == 401

    def test_blocked_user_token_stops_working(self, client, db):
        user = make_user(db, "alice")
        headers = auth_headers(user)
        user.blocked = True
        user.blocked_until = utcnow() + timedelta(days=1)
        db.commit()
        assert client.get("/api/user", headers=headers).status_code == 403


class TestVerifyEmail:
    def test_verify(self, client, db):
        client.post("/api/signup", json=signup_payload())
        user = db.scalars(select(User).where(User.username == "nel_fan")).one()

        resp = client.post("/api/verify-email", json={"token": user.verification_token})

        assert resp.status_code == 200
        db.expire_all()
        user = db.get(User, user.id)
        assert user.email_verified is True
        assert user.verification_token is None

    def test_unknown_token(self, client):
        assert client.post("/api/verify-email", json={"token": "nope"}).status_code == 400

    def test_expired_token(self, client, db):
        user = make_user(db, "alice")
        user.verification_token = "expired-token"
        user.verification_token_expires = utcnow() - timedelta(hours=1)
        db.commit()

        resp = client.post("/api/verify-email", json={"token": "expired-token"})

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Verification token has expired"
