import random

import pytest
from bson import ObjectId

from common.exceptions import CapacityError, ConflictError, NotFoundError
from event import crud
from event.models import RegistrationDetails


def _register(client, event_id, user, json=None):
    return client.post(f"/events/{event_id}/register", headers=user["headers"], json=json)


def _unregister(client, event_id, user):
    return client.post(f"/events/{event_id}/unregister", headers=user["headers"])


def test_register_with_details(client, db, make_user, make_event):
    member = make_user(role="event-member")
    student = make_user()
    event = make_event(member["headers"])

    response = _register(
        client,
        event["id"],
        student,
        json={"phone": "9876543210", "department": "CSE", "year_of_study": "3"},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["registration_count"] == 1
    entry = data["registered_users"][0]
    assert entry["user"]["id"] == student["id"]
    assert entry["department"] == "CSE"
    assert entry["special_requirements"] == ""

    stored_user = db.users.find_one({"_id": ObjectId(student["id"])})
    assert stored_user["registered_events"] == [ObjectId(event["id"])]


def test_register_twice_conflicts(client, make_user, make_event):
    member = make_user(role="event-member")
    student = make_user()
    event = make_event(member["headers"])

    assert _register(client, event["id"], student).status_code == 200
    second = _register(client, event["id"], student)

    assert second.status_code == 400
    assert second.json()["message"] == "You are already registered for this event"


def test_unregister_then_register_again(client, db, make_user, make_event):
    member = make_user(role="event-member")
    student = make_user()
    event = make_event(member["headers"])

    _register(client, event["id"], student)
    left = _unregister(client, event["id"], student)
    again = _register(client, event["id"], student)

    assert left.status_code == 200
    assert again.status_code == 200
    assert again.json()["data"]["registration_count"] == 1
    stored_user = db.users.find_one({"_id": ObjectId(student["id"])})
    assert stored_user["registered_events"] == [ObjectId(event["id"])]


def test_unregister_when_not_registered(client, make_user, make_event):
    member = make_user(role="event-member")
    student = make_user()
    event = make_event(member["headers"])

    response = _unregister(client, event["id"], student)

    assert response.status_code == 400
    assert response.json()["message"] == "You are not registered for this event"


def test_capacity_boundary(client, make_user, make_event):
    member = make_user(role="event-member")
    event = make_event(member["headers"], capacity=2)
    first, second, third = make_user(), make_user(), make_user()

    assert _register(client, event["id"], first).status_code == 200
    at_last_slot = _register(client, event["id"], second)
    full = _register(client, event["id"], third)

    assert at_last_slot.status_code == 200
    assert at_last_slot.json()["data"]["registration_count"] == 2
    assert full.status_code == 400
    assert full.json()["message"] == "Event is full"


def test_only_students_register(client, make_user, make_event):
    member = make_user(role="event-member")
    admin = make_user(role="admin")
    event = make_event(member["headers"])

    assert _register(client, event["id"], member).status_code == 403
    assert _register(client, event["id"], admin).status_code == 403
    assert _unregister(client, event["id"], admin).status_code == 403


def test_register_for_missing_event(client, make_user):
    student = make_user()
    assert _register(client, str(ObjectId()), student).status_code == 404


def test_my_registered_events(client, make_user, make_event):
    member = make_user(role="event-member")
    student = make_user()
    joined = make_event(member["headers"], title="Joined")
    make_event(member["headers"], title="Skipped")
    _register(client, joined["id"], student)

    response = client.get("/events/me/registered", headers=student["headers"])

    assert response.status_code == 200
    assert [e["title"] for e in response.json()["data"]] == ["Joined"]


def test_lowered_capacity_blocks_new_registrations(db, user_doc, event_doc):
    event = event_doc(capacity=2)
    crud.register_for_event(db, event["_id"], user_doc())
    crud.register_for_event(db, event["_id"], user_doc())
    db.events.update_one({"_id": event["_id"]}, {"$set": {"capacity": 1}})

    with pytest.raises(CapacityError):
        crud.register_for_event(db, event["_id"], user_doc())

    stored = db.events.find_one({"_id": event["_id"]})
    assert stored["registration_count"] == 2


def test_count_matches_list_after_any_sequence(db, user_doc, event_doc):
    event = event_doc(capacity=3)
    students = [user_doc() for _ in range(5)]
    rng = random.Random(7)

    for _ in range(60):
        student = rng.choice(students)
        try:
            if rng.random() < 0.6:
                crud.register_for_event(db, event["_id"], student, RegistrationDetails())
            else:
                crud.unregister_from_event(db, event["_id"], student)
        except (ConflictError, CapacityError):
            pass
        stored = db.events.find_one({"_id": event["_id"]})
        assert stored["registration_count"] == len(stored["registered_users"])
        assert len(stored["registered_users"]) <= stored["capacity"]


def test_stale_snapshot_cannot_take_last_slot(db, user_doc, event_doc, monkeypatch):
    event = event_doc(capacity=1)
    slow, fast = user_doc(), user_doc()
    real_find = crud._find_event
    raced = []

    def find_then_lose_race(db_, event_oid):
        snapshot = real_find(db_, event_oid)
        if not raced:
            raced.append(True)
            # A competing request commits between our read and our write.
            crud.register_for_event(db_, event_oid, fast)
        return snapshot

    monkeypatch.setattr(crud, "_find_event", find_then_lose_race)

    with pytest.raises(CapacityError):
        crud.register_for_event(db, event["_id"], slow)

    stored = db.events.find_one({"_id": event["_id"]})
    assert stored["registration_count"] == 1
    assert [entry["user"] for entry in stored["registered_users"]] == [fast["_id"]]


def test_claim_slot_rejects_stale_duplicate(db, user_doc, event_doc):
    event = event_doc(capacity=5)
    student = user_doc()
    crud.register_for_event(db, event["_id"], student)

    entry = {"user": student["_id"], "registered_at": event["created_at"]}
    assert crud._claim_slot(db, event, entry) is False


def test_unregister_missing_event(db, user_doc):
    with pytest.raises(NotFoundError):
        crud.unregister_from_event(db, ObjectId(), user_doc())
