import os

# Must be set before config.py is imported anywhere.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ANON_KEY"] = "test-anon-key"
os.environ.pop("DEMO_ADMIN_EMAIL", None)
os.environ.pop("DEMO_ADMIN_PASSWORD", None)

import pytest
from fastapi.testclient import TestClient

from config import API_PREFIX


@pytest.fixture
def db_session():
    from database import Base, SessionLocal, engine

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(db_session):
    import main

    return TestClient(main.app)


@pytest.fixture
def make_user(client):
    """Signs up and logs in; returns (user_id, access_token)."""

    def _make_user(email, password="secret1", name="A", role="user"):
        resp = client.post(
            f"{API_PREFIX}/signup",
            json={"email": email, "password": password, "name": name, "role": role},
        )
        assert resp.status_code == 200, resp.text
        user_id = resp.json()["userId"]

        resp = client.post(f"{API_PREFIX}/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return user_id, resp.json()["accessToken"]

    return _make_user
