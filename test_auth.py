import pytest

import auth
import kv_store as kv
from auth import AuthError
from models import User


def test_create_user_stores_hashed_password(db_session):
    user = auth.create_user(db_session, "Pilot@Example.com", "secret1", {"name": "Pilot"})

    assert user.email == "pilot@example.com"
    assert user.password_hash != "secret1"
    assert auth.pwd_context.identify(user.password_hash) == "bcrypt"
    assert auth.verify_password("secret1", user.password_hash)
    assert not auth.verify_password("secret2", user.password_hash)
    assert user.role == "user"
    assert user.name == "Pilot"


def test_create_user_rejects_duplicates_and_short_passwords(db_session):
    auth.create_user(db_session, "a@b.com", "secret1")

    with pytest.raises(AuthError, match="already been registered"):
        auth.create_user(db_session, "A@B.com", "secret1")
    with pytest.raises(AuthError, match="at least 6"):
        auth.create_user(db_session, "c@d.com", "12345")
    with pytest.raises(AuthError, match="invalid format"):
        auth.create_user(db_session, "not-an-email", "secret1")


def test_sign_in_and_resolve_token(db_session):
    created = auth.create_user(db_session, "a@b.com", "secret1", {"role": "admin"})

    token, user = auth.sign_in_with_password(db_session, "a@b.com", "secret1")
    assert user.id == created.id

    resolved = auth.get_user(db_session, token)
    assert resolved.id == created.id
    assert resolved.role == "admin"


def test_sign_in_with_wrong_password(db_session):
    auth.create_user(db_session, "a@b.com", "secret1")

    with pytest.raises(AuthError, match="Invalid login credentials"):
        auth.sign_in_with_password(db_session, "a@b.com", "wrong-password")
    with pytest.raises(AuthError, match="Invalid login credentials"):
        auth.sign_in_with_password(db_session, "nobody@b.com", "secret1")


def test_get_user_rejects_tampered_expired_and_orphaned_tokens(db_session, monkeypatch):
    user = auth.create_user(db_session, "a@b.com", "secret1")
    token = auth.create_access_token(user)

    with pytest.raises(AuthError, match="Invalid token"):
        auth.get_user(db_session, token[:-2] + "xx")

    monkeypatch.setattr(auth, "ACCESS_TOKEN_TTL", -1)
    with pytest.raises(AuthError, match="expired"):
        auth.get_user(db_session, token)
    monkeypatch.undo()

    db_session.delete(user)
    db_session.commit()
    with pytest.raises(AuthError, match="User not found"):
        auth.get_user(db_session, token)


def test_list_users_in_creation_order(db_session):
    auth.create_user(db_session, "first@b.com", "secret1")
    auth.create_user(db_session, "second@b.com", "secret1")

    assert [u.email for u in auth.list_users(db_session)] == ["first@b.com", "second@b.com"]


def test_create_initial_users_seeds_admin_once(db_session, monkeypatch):
    monkeypatch.setattr(auth, "DEMO_ADMIN_EMAIL", "admin@example.com")
    monkeypatch.setattr(auth, "DEMO_ADMIN_PASSWORD", "admin123")

    auth.create_initial_users()
    auth.create_initial_users()

    admins = db_session.query(User).all()
    assert len(admins) == 1
    assert admins[0].role == "admin"
    assert kv.get(db_session, f"user:{admins[0].id}")["role"] == "admin"


def test_create_initial_users_is_a_no_op_without_config(db_session):
    auth.create_initial_users()
    assert db_session.query(User).count() == 0
