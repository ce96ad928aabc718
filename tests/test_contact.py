from bson import ObjectId


def contact_payload(**overrides):
    payload = {
        "name": "John Doe",
        "email": "john@student.edu",
        "issue_type": "event-registration",
        "subject": "Cannot register",
        "message": "The register button does nothing.",
    }
    payload.update(overrides)
    return payload


def _submit(client, headers=None, **overrides):
    response = client.post("/contact", json=contact_payload(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_public_submit_is_pending(client):
    data = _submit(client)
    assert data["status"] == "pending"
    assert data["user_id"] is None
    assert data["response"] is None


def test_submit_links_logged_in_user(client, make_user):
    student = make_user()
    data = _submit(client, headers=student["headers"])
    assert data["user_id"] == student["id"]


def test_submit_validates_fields(client):
    response = client.post("/contact", json=contact_payload(issue_type="billing"))
    missing = client.post("/contact", json=contact_payload(subject=""))
    assert response.status_code == 400
    assert missing.status_code == 400


def test_admin_lists_with_status_filter_and_pagination(client, make_user):
    admin = make_user(role="admin")
    for n in range(3):
        _submit(client, subject=f"Issue {n}")
    closed = _submit(client, subject="Old issue")
    client.put(f"/contact/{closed['id']}", json={"status": "closed"}, headers=admin["headers"])

    page = client.get("/contact", params={"limit": 2, "page": 1}, headers=admin["headers"])
    pending = client.get("/contact", params={"status": "pending"}, headers=admin["headers"])

    assert page.status_code == 200
    assert len(page.json()["data"]) == 2
    assert page.json()["pagination"] == {"total": 4, "page": 1, "pages": 2}
    assert pending.json()["pagination"]["total"] == 3


def test_non_admin_cannot_manage_contacts(client, make_user):
    student = make_user()
    data = _submit(client)

    assert client.get("/contact", headers=student["headers"]).status_code == 403
    assert client.get("/contact/stats", headers=student["headers"]).status_code == 403
    assert client.delete(f"/contact/{data['id']}", headers=student["headers"]).status_code == 403
    assert client.get("/contact").status_code == 401


def test_admin_responds(client, make_user):
    admin = make_user(role="admin", name="Support Admin")
    data = _submit(client)

    response = client.put(
        f"/contact/{data['id']}",
        json={"status": "resolved", "response": "Fixed, please try again."},
        headers=admin["headers"],
    )

    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["status"] == "resolved"
    assert updated["response"] == "Fixed, please try again."
    assert updated["responded_by"]["name"] == "Support Admin"
    assert updated["responded_at"] is not None


def test_status_only_update_leaves_response_empty(client, make_user):
    admin = make_user(role="admin")
    data = _submit(client)

    response = client.put(
        f"/contact/{data['id']}", json={"status": "in-progress"}, headers=admin["headers"]
    )

    updated = response.json()["data"]
    assert updated["status"] == "in-progress"
    assert updated["responded_by"] is None


def test_get_and_delete(client, db, make_user):
    admin = make_user(role="admin")
    data = _submit(client)

    fetched = client.get(f"/contact/{data['id']}", headers=admin["headers"])
    deleted = client.delete(f"/contact/{data['id']}", headers=admin["headers"])
    missing = client.get(f"/contact/{data['id']}", headers=admin["headers"])

    assert fetched.json()["data"]["subject"] == "Cannot register"
    assert deleted.status_code == 200
    assert missing.status_code == 404
    assert db.contacts.find_one({"_id": ObjectId(data["id"])}) is None


def test_stats(client, make_user):
    admin = make_user(role="admin")
    _submit(client)
    _submit(client, issue_type="feedback")
    resolved = _submit(client, issue_type="feedback")
    client.put(
        f"/contact/{resolved['id']}", json={"status": "resolved"}, headers=admin["headers"]
    )

    stats = client.get("/contact/stats", headers=admin["headers"]).json()["data"]

    assert stats["total"] == 3
    assert stats["by_status"] == {
        "pending": 2,
        "in_progress": 0,
        "resolved": 1,
        "closed": 0,
    }
    assert stats["by_issue_type"] == {"event-registration": 1, "feedback": 2}
