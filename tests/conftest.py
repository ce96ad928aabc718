import itertools
from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from fastapi.testclient import TestClient

from auth import crud as auth_crud
from auth.models import UserCreate
from common.database import get_mongo_db, init_indexes
from event import crud as event_crud
from event.models import EventCreate
from main import app

_counter = itertools.count()


def future(days=30):
    return datetime.now(timezone.utc) + timedelta(days=days)


def event_payload(**overrides):
    payload = {
        "title": "TechFest",
        "description": "Hackathons, tech talks and innovation showcases.",
        "category": "technical",
        "date": future().isoformat(),
        "time": "09:00 AM",
        "venue": "Main Auditorium",
    }
    payload.update(overrides)
    return payload


@pytest.fixture(autouse=True)
def no_generative_api(monkeypatch):
    monkeypatch.setattr("chat.responder.GEMINI_API_KEY", "")


@pytest.fixture
def db():
    mongo = mongomock.MongoClient()
    database = mongo["college_events_test"]
    init_indexes(database)
    yield database
    mongo.close()


@pytest.fixture
def client(db):
    app.dependency_overrides[get_mongo_db] = lambda: db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(client):
    """Sign up through the API and return id, token and auth headers."""

    def _make(role="student", name=None, password="secret123"):
        n = next(_counter)
        response = client.post(
            "/auth/signup",
            json={
                "name": name or f"User {n}",
                "email": f"{role}{n}@college.edu",
                "password": password,
                "role": role,
            },
        )
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return {
            "id": data["user"]["id"],
            "email": data["user"]["email"],
            "token": data["access_token"],
            "headers": {"Authorization": f"Bearer {data['access_token']}"},
        }

    return _make


@pytest.fixture
def make_event(client):
    def _make(headers, **overrides):
        response = client.post("/events", json=event_payload(**overrides), headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


@pytest.fixture
def user_doc(db):
    """Create a user directly in the store."""

    def _make(role="student"):
        n = next(_counter)
        return auth_crud.create_user(
            db,
            UserCreate(
                name=f"User {n}", email=f"{role}{n}@college.edu", password="secret123", role=role
            ),
        )

    return _make


@pytest.fixture
def event_doc(db, user_doc):
    def _make(creator=None, **overrides):
        creator = creator or user_doc("event-member")
        return event_crud.create_event(db, EventCreate(**event_payload(**overrides)), creator)

    return _make
