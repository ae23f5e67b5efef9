"""The authorization gate: bearer tokens signed with the configured key."""
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.core.config import ALGORITHM, SECRET_KEY
from app.database import get_session
from app.main import app
from app.models.user import User


@pytest.fixture
def gated_client(session):
    """Client with the real auth dependency; only the session is replaced."""

    def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _token(user_id, key=SECRET_KEY):
    return jwt.encode({"sub": str(user_id)}, key, algorithm=ALGORITHM)


def _add_user(session, is_active=True):
    user = User(email=f"{uuid4().hex}@example.com", is_active=is_active)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def test_missing_token_is_rejected(gated_client):
    assert gated_client.get("/debts/").status_code == 401


def test_valid_token_passes(gated_client, session):
    user = _add_user(session)

    response = gated_client.get("/debts/", headers={"Authorization": f"Bearer {_token(user.id)}"})

    assert response.status_code == 200
    assert response.json() == []


def test_token_with_wrong_signature(gated_client, session):
    user = _add_user(session)

    response = gated_client.get(
        "/transactions/", headers={"Authorization": f"Bearer {_token(user.id, key='otra-clave')}"}
    )

    assert response.status_code == 401


def test_token_for_unknown_user(gated_client):
    response = gated_client.get("/debts/", headers={"Authorization": f"Bearer {_token(uuid4())}"})

    assert response.status_code == 401


def test_inactive_user_is_forbidden(gated_client, session):
    user = _add_user(session, is_active=False)

    response = gated_client.get("/debts/", headers={"Authorization": f"Bearer {_token(user.id)}"})

    assert response.status_code == 403
