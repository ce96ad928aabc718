from seed import EVENTS, USERS, seed_database


def test_seed_creates_demo_data(db):
    db.chats.insert_one({"conversation_id": "stale", "messages": []})

    users, events = seed_database(db)

    assert db.users.count_documents({}) == len(USERS)
    assert db.events.count_documents({}) == len(EVENTS)
    assert db.chats.count_documents({}) == 0
    creator = db.users.find_one({"_id": events[0]["created_by"]})
    assert creator["role"] == "event-member"
    assert len(creator["created_events"]) == len(EVENTS)


def test_seeded_credentials_log_in(client, db):
    seed_database(db)
    name, email, password, role = USERS[1]

    response = client.post("/auth/login", json={"email": email, "password": password})

    assert response.status_code == 200
    assert response.json()["data"]["user"]["role"] == role.value
